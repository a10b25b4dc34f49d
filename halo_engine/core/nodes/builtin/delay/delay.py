"""
Delay Node - Compute when a workflow should resume

The node reports the resume time instead of holding the run: it only
sleeps in-process up to ``settings.MAX_INLINE_DELAY_SECONDS``.
"""

import asyncio
import logging
import re
from datetime import datetime, timedelta

from halo_engine.config import settings
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import HaloNode, NodeExecutionData, NodeOutput
from halo_engine.schemas.node import (
    DisplayOptions,
    NodeDescription,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)
from halo_engine.utils.timezone import to_iso, utc_now

logger = logging.getLogger(__name__)

# Milliseconds per unit
TIME_UNIT_MS = {
    "seconds": 1000,
    "minutes": 60 * 1000,
    "hours": 60 * 60 * 1000,
    "days": 24 * 60 * 60 * 1000,
}

_RESUME_TIME = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def compute_resume_at(start: datetime, delay_ms: float, resume_mode: str, resume_time: str) -> datetime:
    """
    Resume instant for a delay started at ``start``.

    The wait is added first, then the result is snapped:

    - immediately: start + delay
    - nextHour: top of the hour after start + delay
    - nextDay: midnight after start + delay
    - specificTime: ``resume_time`` (HH:MM, UTC) on the day of start + delay,
      a day later if that is not after start
    """
    target = start + timedelta(milliseconds=delay_ms)

    if resume_mode == "immediately":
        return target

    if resume_mode == "nextHour":
        return target.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)

    if resume_mode == "nextDay":
        return target.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)

    if resume_mode == "specificTime":
        match = _RESUME_TIME.match((resume_time or "").strip())
        if not match:
            raise ValueError(f"Invalid resume time '{resume_time}', expected HH:MM")
        target = target.replace(hour=int(match.group(1)), minute=int(match.group(2)), second=0, microsecond=0)
        if target <= start:
            target += timedelta(days=1)
        return target

    raise ValueError(f"Unknown resume mode '{resume_mode}'")


class DelayNode(HaloNode):
    """
    Delay Node - Wait before continuing.

    Emits one item per input item with the computed schedule:
    delayStarted, delayDuration, waitTime, timeUnit, resumeMode, resumeAt,
    estimatedDelayMs and previousNodeData.
    """

    description = NodeDescription(
        name="delay",
        display_name="Delay",
        description="Wait for a period of time before continuing",
        group=["logic"],
        color="#6B7280",
        properties=[
            NodeProperty(
                name="waitTime",
                display_name="Wait Time",
                kind=ParameterKind.NUMBER,
                default=1,
                required=True,
            ),
            NodeProperty(
                name="timeUnit",
                display_name="Time Unit",
                kind=ParameterKind.OPTIONS,
                default="seconds",
                options=[
                    ParameterOption(name="Seconds", value="seconds"),
                    ParameterOption(name="Minutes", value="minutes"),
                    ParameterOption(name="Hours", value="hours"),
                    ParameterOption(name="Days", value="days"),
                ],
            ),
            NodeProperty(
                name="resumeMode",
                display_name="Resume Mode",
                kind=ParameterKind.OPTIONS,
                default="immediately",
                options=[
                    ParameterOption(name="Immediately After Delay", value="immediately"),
                    ParameterOption(name="At Next Hour", value="nextHour"),
                    ParameterOption(name="At Next Day", value="nextDay"),
                    ParameterOption(name="At Specific Time", value="specificTime"),
                ],
            ),
            NodeProperty(
                name="resumeTime",
                display_name="Resume Time",
                default="09:00",
                placeholder="HH:MM",
                display_options=DisplayOptions(show={"resumeMode": ["specificTime"]}),
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        start = utc_now()
        results = []
        longest_ms = 0.0

        for index, item in enumerate(context.get_input_data()):
            wait_time = context.get_node_parameter("waitTime", index)
            time_unit = context.get_node_parameter("timeUnit", index)
            resume_mode = context.get_node_parameter("resumeMode", index)
            resume_time = context.get_node_parameter("resumeTime", index)

            if wait_time is None or wait_time < 0:
                raise NodeOperationError("Wait time must be a non-negative number")

            delay_ms = wait_time * TIME_UNIT_MS[time_unit]
            try:
                resume_at = compute_resume_at(start, delay_ms, resume_mode, resume_time)
            except ValueError as e:
                raise NodeOperationError(str(e)) from e

            estimated_ms = int(round((resume_at - start).total_seconds() * 1000))
            longest_ms = max(longest_ms, estimated_ms)

            results.append(NodeExecutionData(json={
                "delayStarted": to_iso(start),
                "delayDuration": delay_ms,
                "waitTime": wait_time,
                "timeUnit": time_unit,
                "resumeMode": resume_mode,
                "resumeAt": to_iso(resume_at),
                "estimatedDelayMs": estimated_ms,
                "previousNodeData": item.json,
            }))

        inline_seconds = min(longest_ms / 1000, settings.MAX_INLINE_DELAY_SECONDS)
        if inline_seconds > 0:
            logger.info(f"⏳ Delay: waiting {inline_seconds:.1f}s in-process")
            await asyncio.sleep(inline_seconds)

        logger.info(f"⏰ Delay scheduled for {len(results)} item(s), longest {longest_ms} ms")
        return [results]
