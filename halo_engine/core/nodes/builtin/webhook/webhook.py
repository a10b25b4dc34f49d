"""
Webhook Node - Start a workflow from an incoming HTTP request

The trigger payload is passed through unchanged, with the webhook's
settings attached under ``webhook``. When authentication is configured the
payload's ``headers`` or ``query`` must carry the expected value.
"""

import hmac
import logging
from typing import Any, Dict

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


def _lookup(mapping: Any, key: str) -> Any:
    """Case-insensitive key lookup (HTTP header names)."""
    if not isinstance(mapping, dict):
        return None
    wanted = key.lower()
    for name, value in mapping.items():
        if str(name).lower() == wanted:
            return value
    return None


def _matches(received: Any, expected: str) -> bool:
    if received is None or not expected:
        return False
    return hmac.compare_digest(str(received).encode("utf-8"), expected.encode("utf-8"))


class WebhookNode(HaloNode):
    """Webhook trigger."""

    description = NodeDescription(
        name="webhook",
        display_name="Webhook",
        description="Starts the workflow when a webhook is called",
        group=["trigger"],
        color="#885577",
        inputs=[],
        outputs=["main"],
        properties=[
            NodeProperty(
                name="httpMethod",
                display_name="HTTP Method",
                kind=ParameterKind.OPTIONS,
                default="POST",
                options=[
                    ParameterOption(name="POST", value="POST"),
                    ParameterOption(name="GET", value="GET"),
                    ParameterOption(name="PUT", value="PUT"),
                    ParameterOption(name="PATCH", value="PATCH"),
                    ParameterOption(name="DELETE", value="DELETE"),
                ],
            ),
            NodeProperty(
                name="authentication",
                display_name="Authentication",
                kind=ParameterKind.OPTIONS,
                default="none",
                options=[
                    ParameterOption(name="None", value="none"),
                    ParameterOption(name="Header Auth", value="headerAuth"),
                    ParameterOption(name="Query Auth", value="queryAuth"),
                ],
            ),
            NodeProperty(
                name="authHeaderName",
                display_name="Header Name",
                default="X-API-Key",
                display_options=DisplayOptions(show={"authentication": ["headerAuth"]}),
            ),
            NodeProperty(
                name="authHeaderValue",
                display_name="Header Value",
                default="",
                display_options=DisplayOptions(show={"authentication": ["headerAuth"]}),
            ),
            NodeProperty(
                name="authQueryParam",
                display_name="Query Parameter",
                default="token",
                display_options=DisplayOptions(show={"authentication": ["queryAuth"]}),
            ),
            NodeProperty(
                name="authQueryValue",
                display_name="Query Value",
                default="",
                display_options=DisplayOptions(show={"authentication": ["queryAuth"]}),
            ),
            NodeProperty(
                name="responseMode",
                display_name="Response Mode",
                kind=ParameterKind.OPTIONS,
                default="responseNode",
                options=[
                    ParameterOption(name="Using Response Node", value="responseNode"),
                    ParameterOption(name="No Response Body", value="noData"),
                    ParameterOption(name="Last Node", value="lastNode"),
                ],
            ),
        ],
    )

    def _authenticate(self, context, index: int, payload: Dict[str, Any]) -> None:
        authentication = context.get_node_parameter("authentication", index)
        if authentication == "headerAuth":
            name = context.get_node_parameter("authHeaderName", index)
            expected = context.get_node_parameter("authHeaderValue", index)
            if not _matches(_lookup(payload.get("headers"), name), expected):
                raise NodeOperationError(f"Webhook authentication failed: invalid '{name}' header")
        elif authentication == "queryAuth":
            param = context.get_node_parameter("authQueryParam", index)
            expected = context.get_node_parameter("authQueryValue", index)
            query = payload.get("query") or {}
            if not _matches(query.get(param) if isinstance(query, dict) else None, expected):
                raise NodeOperationError(f"Webhook authentication failed: invalid '{param}' query parameter")

    async def execute(self, context) -> NodeOutput:
        received_at = to_iso(utc_now())
        results = []

        for index, item in enumerate(context.get_input_data()):
            self._authenticate(context, index, item.json)
            results.append(NodeExecutionData(
                json={
                    **item.json,
                    "webhook": {
                        "httpMethod": context.get_node_parameter("httpMethod", index),
                        "authentication": context.get_node_parameter("authentication", index),
                        "responseMode": context.get_node_parameter("responseMode", index),
                        "receivedAt": received_at,
                    },
                },
                binary=item.binary,
            ))

        logger.info(f"🪝 Webhook received {len(results)} item(s)")
        return [results]
