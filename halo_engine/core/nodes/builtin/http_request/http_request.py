"""
HTTP Request Node - Call any HTTP API

One request per input item. A failed request does not fail the step; the
item carries ``{"error", "statusCode": 500}`` instead.
"""

import logging

from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import HaloNode, NodeExecutionData, NodeOutput
from halo_engine.schemas.node import (
    NodeDescription,
    NodeProperty,
    ParameterKind,
    ParameterOption,
)

logger = logging.getLogger(__name__)

_BODYLESS_METHODS = ("GET", "DELETE")


class HttpRequestNode(HaloNode):
    description = NodeDescription(
        name="httpRequest",
        display_name="HTTP Request",
        description="Make HTTP requests to any URL",
        group=["transform"],
        color="#2200DD",
        properties=[
            NodeProperty(
                name="method",
                display_name="Method",
                kind=ParameterKind.OPTIONS,
                default="GET",
                options=[
                    ParameterOption(name="GET", value="GET"),
                    ParameterOption(name="POST", value="POST"),
                    ParameterOption(name="PUT", value="PUT"),
                    ParameterOption(name="DELETE", value="DELETE"),
                    ParameterOption(name="PATCH", value="PATCH"),
                ],
            ),
            NodeProperty(
                name="url",
                display_name="URL",
                required=True,
                default="",
                placeholder="https://api.example.com/endpoint",
            ),
            NodeProperty(
                name="headers",
                display_name="Headers",
                kind=ParameterKind.JSON,
                default="{}",
            ),
            NodeProperty(
                name="body",
                display_name="Body",
                kind=ParameterKind.JSON,
                default="{}",
            ),
        ],
    )

    async def execute(self, context) -> NodeOutput:
        results = []

        for index, _item in enumerate(context.get_input_data()):
            method = context.get_node_parameter("method", index)
            url = context.get_node_parameter("url", index)
            headers = context.get_node_parameter("headers", index)
            body = context.get_node_parameter("body", index)

            if not url:
                raise NodeOperationError("URL is required")
            if not isinstance(headers, dict):
                raise NodeOperationError("Headers must be a JSON object")

            options = {
                "method": method,
                "url": url,
                "headers": {str(k): str(v) for k, v in headers.items()},
                "return_full_response": True,
            }
            if method not in _BODYLESS_METHODS and body:
                options["body"] = body

            try:
                response = await context.helpers.request(options)
                results.append(NodeExecutionData(json=response))
            except NodeOperationError as e:
                logger.warning(f"⚠️ HTTP Request item {index} failed: {e}")
                results.append(NodeExecutionData(json={"error": str(e), "statusCode": 500}))

        return [results]
