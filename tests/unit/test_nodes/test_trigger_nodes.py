"""
Unit tests for the trigger nodes (Webhook, Schedule Trigger)
"""

import pytest

from halo_engine.core.execution.context import NodeExecuteContext
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import NodeExecutionData
from halo_engine.core.nodes.builtin.schedule_trigger.schedule_trigger import ScheduleTriggerNode, validate_cron
from halo_engine.core.nodes.builtin.webhook.webhook import WebhookNode


def webhook_context(parameters, payload):
    return NodeExecuteContext(
        description=WebhookNode.description,
        parameters=parameters,
        input_items=[NodeExecutionData(json=payload)],
    )


class TestWebhookNode:

    def test_is_trigger(self):
        assert WebhookNode.description.is_trigger

    @pytest.mark.asyncio
    async def test_passes_payload_through(self):
        [[item]] = await WebhookNode().execute(webhook_context({}, {"body": {"id": 1}}))

        assert item.json["body"] == {"id": 1}
        assert item.json["webhook"]["authentication"] == "none"
        assert item.json["webhook"]["responseMode"] == "responseNode"
        assert item.json["webhook"]["receivedAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_header_auth(self):
        parameters = {"authentication": "headerAuth", "authHeaderValue": "s3cret"}

        [[item]] = await WebhookNode().execute(
            webhook_context(parameters, {"headers": {"x-api-key": "s3cret"}})
        )
        assert item.json["headers"] == {"x-api-key": "s3cret"}

        with pytest.raises(NodeOperationError, match="Webhook authentication failed"):
            await WebhookNode().execute(webhook_context(parameters, {"headers": {"X-API-Key": "wrong"}}))

    @pytest.mark.asyncio
    async def test_query_auth(self):
        parameters = {"authentication": "queryAuth", "authQueryValue": "abc"}

        await WebhookNode().execute(webhook_context(parameters, {"query": {"token": "abc"}}))
        with pytest.raises(NodeOperationError):
            await WebhookNode().execute(webhook_context(parameters, {"query": {}}))

    @pytest.mark.asyncio
    async def test_auth_without_expected_value_rejects(self):
        parameters = {"authentication": "headerAuth"}

        with pytest.raises(NodeOperationError):
            await WebhookNode().execute(webhook_context(parameters, {"headers": {"X-API-Key": ""}}))


def schedule_context(parameters, payload=None):
    return NodeExecuteContext(
        description=ScheduleTriggerNode.description,
        parameters=parameters,
        input_items=[NodeExecutionData(json=payload or {})],
    )


class TestScheduleTriggerNode:

    @pytest.mark.asyncio
    async def test_interval(self):
        [[item]] = await ScheduleTriggerNode().execute(schedule_context({"interval": 15}))

        assert item.json["triggerType"] == "interval"
        assert item.json["interval"] == 15
        assert item.json["timezone"] == "UTC"
        assert "triggerData" not in item.json

    @pytest.mark.asyncio
    async def test_cron_with_timezone(self):
        context = schedule_context(
            {"triggerType": "cron", "cronExpression": "0  9 * * 1-5", "timezone": "Europe/Berlin"},
            payload={"firedBy": "scheduler"},
        )

        [[item]] = await ScheduleTriggerNode().execute(context)

        assert item.json["cronExpression"] == "0 9 * * 1-5"
        assert item.json["timezone"] == "Europe/Berlin"
        assert item.json["triggerData"] == {"firedBy": "scheduler"}

    @pytest.mark.asyncio
    async def test_invalid_settings(self):
        for parameters in (
            {"interval": 0},
            {"triggerType": "cron", "cronExpression": "* * *"},
            {"timezone": "Mars/Olympus"},
        ):
            with pytest.raises(NodeOperationError):
                await ScheduleTriggerNode().execute(schedule_context(parameters))

    def test_validate_cron(self):
        assert validate_cron("*/5 * * * *") == "*/5 * * * *"
        with pytest.raises(NodeOperationError):
            validate_cron("")
