"""
Schedule Trigger Node - Start a workflow on an interval or cron schedule

Scheduling itself happens outside the engine; this node validates the rule
and describes the firing that started the run.
"""

import logging
from datetime import timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

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


def _resolve_timezone(name: str):
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise NodeOperationError(f"Unknown timezone '{name}'") from e


def validate_cron(expression: str) -> str:
    """Five whitespace-separated fields; anything else is rejected."""
    fields = (expression or "").split()
    if len(fields) != 5:
        raise NodeOperationError(
            f"Invalid cron expression '{expression}': expected 5 fields, got {len(fields)}"
        )
    return " ".join(fields)


class ScheduleTriggerNode(HaloNode):
    description = NodeDescription(
        name="scheduleTrigger",
        display_name="Schedule Trigger",
        description="Starts the workflow on a schedule",
        group=["trigger"],
        color="#31C49F",
        inputs=[],
        outputs=["main"],
        properties=[
            NodeProperty(
                name="triggerType",
                display_name="Trigger Type",
                kind=ParameterKind.OPTIONS,
                default="interval",
                options=[
                    ParameterOption(name="Interval", value="interval"),
                    ParameterOption(name="Cron Expression", value="cron"),
                ],
            ),
            NodeProperty(
                name="interval",
                display_name="Interval (minutes)",
                kind=ParameterKind.NUMBER,
                default=60,
                display_options=DisplayOptions(show={"triggerType": ["interval"]}),
            ),
            NodeProperty(
                name="cronExpression",
                display_name="Cron Expression",
                default="0 */1 * * *",
                placeholder="0 9 * * 1-5",
                display_options=DisplayOptions(show={"triggerType": ["cron"]}),
            ),
            NodeProperty(
                name="timezone",
                display_name="Timezone",
                default="UTC",
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        trigger_type = context.get_node_parameter("triggerType", 0)
        tz_name = context.get_node_parameter("timezone", 0) or "UTC"
        tz = _resolve_timezone(tz_name)
        now = utc_now()

        output = {
            "timestamp": to_iso(now),
            "scheduledTime": now.astimezone(tz).isoformat(timespec="seconds"),
            "timezone": tz_name,
            "triggerType": trigger_type,
        }

        if trigger_type == "cron":
            output["cronExpression"] = validate_cron(context.get_node_parameter("cronExpression", 0))
            output["message"] = f"Triggered by cron schedule '{output['cronExpression']}'"
        else:
            interval = context.get_node_parameter("interval", 0)
            if interval is None or interval <= 0:
                raise NodeOperationError("Interval must be a positive number of minutes")
            output["interval"] = interval
            output["message"] = f"Triggered every {interval} minute(s)"

        # Carry the trigger payload (e.g. the scheduler's firing details)
        items = context.get_input_data()
        if items and items[0].json:
            output["triggerData"] = items[0].json

        logger.info(f"⏰ Schedule trigger fired ({trigger_type}, {tz_name})")
        return [[NodeExecutionData(json=output)]]
