"""
Unit tests for the Delay node
"""

from datetime import datetime, timedelta, timezone

import pytest

from halo_engine.core.execution.context import NodeExecuteContext
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import NodeExecutionData
from halo_engine.core.nodes.builtin.delay.delay import DelayNode, compute_resume_at

TWO_DAYS_MS = 2 * 24 * 60 * 60 * 1000


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def make_context(parameters, items=({"orderId": 7},)):
    return NodeExecuteContext(
        description=DelayNode.description,
        parameters=parameters,
        input_items=[NodeExecutionData(json=dict(item)) for item in items],
    )


class TestDelayNode:
    """Resume time computation"""

    @pytest.mark.asyncio
    async def test_five_second_delay(self):
        node = DelayNode()
        context = make_context({"waitTime": 5, "timeUnit": "seconds", "resumeMode": "immediately"})

        [[item]] = await node.execute(context)
        data = item.json

        assert data["estimatedDelayMs"] == 5000
        assert data["delayDuration"] == 5000
        assert parse_iso(data["resumeAt"]) - parse_iso(data["delayStarted"]) == timedelta(milliseconds=5000)
        assert data["previousNodeData"] == {"orderId": 7}

    @pytest.mark.asyncio
    async def test_string_wait_time_is_coerced(self):
        node = DelayNode()
        context = make_context({"waitTime": "2", "timeUnit": "minutes"})

        [[item]] = await node.execute(context)

        assert item.json["estimatedDelayMs"] == 120000

    @pytest.mark.asyncio
    async def test_negative_wait_time_fails(self):
        node = DelayNode()

        with pytest.raises(NodeOperationError):
            await node.execute(make_context({"waitTime": -1}))

    @pytest.mark.asyncio
    async def test_one_item_per_input(self):
        node = DelayNode()
        context = make_context({"waitTime": 1}, items=({"n": 1}, {"n": 2}))

        [items] = await node.execute(context)

        assert [item.json["previousNodeData"]["n"] for item in items] == [1, 2]

    @pytest.mark.asyncio
    async def test_next_day_counts_from_end_of_wait(self):
        node = DelayNode()
        context = make_context({"waitTime": 2, "timeUnit": "days", "resumeMode": "nextDay"})

        [[item]] = await node.execute(context)

        waited = parse_iso(item.json["delayStarted"]) + timedelta(days=2)
        expected = waited.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
        assert parse_iso(item.json["resumeAt"]) == expected
        assert item.json["delayDuration"] == 2 * 24 * 60 * 60 * 1000
        assert item.json["estimatedDelayMs"] > item.json["delayDuration"]

class TestComputeResumeAt:
    START = datetime(2024, 3, 1, 10, 30, 15, tzinfo=timezone.utc)

    def test_immediately(self):
        assert compute_resume_at(self.START, 1500, "immediately", "") == self.START + timedelta(milliseconds=1500)

    def test_next_hour(self):
        assert compute_resume_at(self.START, 0, "nextHour", "") == datetime(2024, 3, 1, 11, tzinfo=timezone.utc)

    def test_next_day(self):
        assert compute_resume_at(self.START, 0, "nextDay", "") == datetime(2024, 3, 2, tzinfo=timezone.utc)

    def test_specific_time_later_today(self):
        result = compute_resume_at(self.START, 0, "specificTime", "14:00")

        assert result == datetime(2024, 3, 1, 14, 0, tzinfo=timezone.utc)

    def test_specific_time_already_passed(self):
        result = compute_resume_at(self.START, 0, "specificTime", "09:00")

        assert result == datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)

    def test_invalid_resume_time(self):
        with pytest.raises(ValueError):
            compute_resume_at(self.START, 0, "specificTime", "25:99")

    def test_next_hour_after_wait(self):
        result = compute_resume_at(self.START, 90 * 60 * 1000, "nextHour", "")

        assert result == datetime(2024, 3, 1, 13, tzinfo=timezone.utc)

    def test_next_day_after_wait(self):
        result = compute_resume_at(self.START, TWO_DAYS_MS, "nextDay", "")

        assert result == datetime(2024, 3, 4, tzinfo=timezone.utc)

    def test_specific_time_after_wait(self):
        result = compute_resume_at(self.START, TWO_DAYS_MS, "specificTime", "14:00")

        assert result == datetime(2024, 3, 3, 14, 0, tzinfo=timezone.utc)

    def test_specific_time_earlier_in_day_after_wait(self):
        result = compute_resume_at(self.START, TWO_DAYS_MS, "specificTime", "09:00")

        assert result == datetime(2024, 3, 3, 9, 0, tzinfo=timezone.utc)
