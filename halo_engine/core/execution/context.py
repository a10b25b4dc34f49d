"""
Execution Context

Run-level state (ExecutionContext) and the per-step facade handed to a
node's execute() (NodeExecuteContext).
"""

import asyncio
import copy
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from halo_engine.config import settings
from halo_engine.core.execution.exceptions import NodeOperationError, WorkflowValidationError
from halo_engine.core.nodes.base import NodeExecutionData, is_node_output
from halo_engine.schemas.node import NodeDescription, NodeProperty, ParameterKind
from halo_engine.utils.timezone import utc_now

logger = logging.getLogger(__name__)

TRIGGER_STEP_ID = "trigger"

_MISSING = object()


@dataclass
class ExecutionContext:
    """
    Runtime state of one workflow run.

    ``step_outputs`` is the accumulated ``previousStepOutputs`` map: it starts
    as ``{"trigger": trigger_data}`` and gains one entry per finished step.
    """
    workflow_id: str
    execution_id: str
    tenant_id: str
    trigger_data: Dict[str, Any] = field(default_factory=dict)
    step_outputs: Dict[str, Any] = field(default_factory=dict)
    skipped_steps: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=utc_now)
    cancel_event: Optional[asyncio.Event] = None

    def __post_init__(self):
        self.step_outputs.setdefault(TRIGGER_STEP_ID, self.trigger_data)

    def record_output(self, step_id: str, output: Any) -> None:
        self.step_outputs[step_id] = output

    def record_skip(self, step_id: str) -> None:
        self.skipped_steps.append(step_id)
        self.step_outputs[step_id] = {"channel": None, "json": {}, "channels": {}, "skipped": True}

    def snapshot_outputs(self) -> Dict[str, Any]:
        """Deep copy of the accumulated outputs, safe to hand to an invocation."""
        return copy.deepcopy(self.step_outputs)

    def is_cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def get_input_items(self, source: str, channel: Optional[str] = None) -> List[NodeExecutionData]:
        """
        Items a step receives from ``source`` on ``channel``.

        Without a channel the upstream's first declared channel is used.
        Opaque (remote) outputs arrive as a single ``{"json": output}`` item.

        Raises:
            WorkflowValidationError: ``source`` has not run yet or has no such channel
        """
        if source not in self.step_outputs:
            raise WorkflowValidationError(f"Step input references unknown or later step '{source}'")

        output = self.step_outputs[source]

        if is_node_output(output):
            if output.get("skipped"):
                return []
            channels = output.get("channels") or {}
            if channel is None:
                channel = next(iter(channels), None)
                if channel is None:
                    return []
            if channel not in channels:
                raise WorkflowValidationError(f"Step '{source}' has no output channel '{channel}'")
            return [NodeExecutionData.from_dict(item) for item in channels[channel]]

        if output is None:
            return [NodeExecutionData(json={})]
        if isinstance(output, dict):
            return [NodeExecutionData(json=copy.deepcopy(output))]
        return [NodeExecutionData(json={"value": copy.deepcopy(output)})]


class RequestHelpers:
    """
    Outbound HTTP for nodes (``context.helpers.request``), backed by httpx.

    Args:
        timeout: Default timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.INTEGRATION_TIMEOUT_SECONDS
        self._transport = transport

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                pass
        return response.text

    async def request(self, options: Dict[str, Any]) -> Any:
        """
        Perform one HTTP request.

        Options:
            method: HTTP verb (default GET)
            url: Absolute URL (required)
            headers, params: Mappings
            json: Object sent as a JSON body
            body: Raw string/bytes body, or a mapping sent as JSON
            data: Form fields
            timeout: Per-request timeout override
            return_full_response: Return ``{"statusCode", "headers", "body"}``

        Returns:
            Parsed response body (JSON when the server says so, else text)

        Raises:
            NodeOperationError: Transport failure or a 4xx/5xx status
        """
        url = options.get("url")
        if not url:
            raise NodeOperationError("Request URL is required")

        method = str(options.get("method") or "GET").upper()
        body = options.get("body")
        json_body = options.get("json")
        if isinstance(body, (dict, list)) and json_body is None:
            json_body, body = body, None

        logger.info(f"🌐 HTTP Request: {method} {url}")

        try:
            async with httpx.AsyncClient(
                timeout=options.get("timeout", self.timeout),
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=options.get("headers") or None,
                    params=options.get("params") or None,
                    json=json_body,
                    content=body,
                    data=options.get("data"),
                )
        except httpx.TimeoutException as e:
            raise NodeOperationError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NodeOperationError(f"Request failed: {e}") from e

        parsed = self._parse_body(response)
        if response.status_code >= 400:
            detail = parsed if isinstance(parsed, str) else json.dumps(parsed)
            raise NodeOperationError(
                f"Request failed with status code {response.status_code}: {detail[:300]}",
                status_code=response.status_code,
            )

        if options.get("return_full_response"):
            return {
                "statusCode": response.status_code,
                "headers": dict(response.headers),
                "body": parsed,
            }
        return parsed


class NodeExecuteContext:
    """
    What a node's execute() sees.

    Parameters come from the step's (template-resolved) config. A config
    value holding a list for a scalar parameter is read per item; indexes
    outside that list fall back to the declared default.
    """

    def __init__(
        self,
        description: NodeDescription,
        parameters: Optional[Dict[str, Any]] = None,
        input_items: Optional[Sequence[Union[NodeExecutionData, Dict[str, Any]]]] = None,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        helpers: Optional[RequestHelpers] = None,
        step_id: Optional[str] = None,
        tenant_id: Optional[str] = None,
    ):
        self.description = description
        self._parameters: Dict[str, Any] = copy.deepcopy(dict(parameters or {}))
        self._input_items: List[NodeExecutionData] = [
            item.copy() if isinstance(item, NodeExecutionData) else NodeExecutionData.from_dict(item)
            for item in (input_items or [])
        ]
        self._credentials = credentials or {}
        self.helpers = helpers or RequestHelpers()
        self.step_id = step_id
        self.tenant_id = tenant_id

    def get_input_data(self) -> List[NodeExecutionData]:
        """Fresh copies of the items on the primary input."""
        return [item.copy() for item in self._input_items]

    def get_credentials(self, credential_type: str) -> Optional[Dict[str, Any]]:
        """Credential bundle for a named requirement, or None if not configured."""
        bundle = self._credentials.get(credential_type)
        if not bundle:
            return None
        return dict(bundle)

    def get_node_parameter(self, name: str, item_index: int = 0, fallback: Any = _MISSING) -> Any:
        """
        Resolve a parameter for one item.

        Args:
            name: Parameter name
            item_index: Index of the item being processed
            fallback: Returned for undeclared, unset parameters instead of raising

        Returns:
            Configured value (coerced to the parameter kind) or the declared default.
            Parameters hidden by display options resolve to their default.

        Raises:
            NodeOperationError: Unknown parameter, or a value that cannot be
                coerced to its declared kind
        """
        prop = self.description.get_property(name)
        if prop is None:
            if name in self._parameters:
                return copy.deepcopy(self._parameters[name])
            if fallback is not _MISSING:
                return fallback
            raise NodeOperationError(f"Could not get parameter '{name}'")

        if not prop.is_visible(self._visibility_values()):
            return self._coerce(prop, prop.default)

        if name not in self._parameters or self._parameters[name] is None:
            return self._coerce(prop, prop.default)

        value = self._parameters[name]
        if isinstance(value, list) and prop.kind not in (ParameterKind.JSON, ParameterKind.COLLECTION):
            if 0 <= item_index < len(value) and value[item_index] is not None:
                value = value[item_index]
            else:
                return self._coerce(prop, prop.default)

        return self._coerce(prop, copy.deepcopy(value))

    def _visibility_values(self) -> Dict[str, Any]:
        values = self.description.defaults()
        for key, value in self._parameters.items():
            if value is not None:
                values[key] = value
        return values

    def _coerce(self, prop: NodeProperty, value: Any) -> Any:
        if value is None:
            return None

        if prop.kind == ParameterKind.NUMBER:
            return self._coerce_number(prop, value)
        if prop.kind == ParameterKind.BOOLEAN:
            return self._coerce_boolean(prop, value)
        if prop.kind in (ParameterKind.JSON, ParameterKind.COLLECTION):
            return self._coerce_json(prop, value)
        if prop.kind == ParameterKind.OPTIONS:
            if value not in prop.option_values():
                raise NodeOperationError(
                    f"Invalid value '{value}' for parameter '{prop.name}'. "
                    f"Expected one of: {', '.join(str(v) for v in prop.option_values())}"
                )
            return value

        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)

    def _coerce_number(self, prop: NodeProperty, value: Any) -> Any:
        if isinstance(value, bool):
            raise NodeOperationError(f"Parameter '{prop.name}' must be a number")
        if isinstance(value, (int, float)):
            return value

        text = str(value).strip()
        if not text:
            if prop.default in (None, ""):
                return None
            return self._coerce_number(prop, prop.default)
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            raise NodeOperationError(f"Parameter '{prop.name}' must be a number, got '{value}'")

    def _coerce_boolean(self, prop: NodeProperty, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        text = str(value).strip().lower()
        if text in ("true", "1", "yes", "on"):
            return True
        if text in ("false", "0", "no", "off", ""):
            return False
        raise NodeOperationError(f"Parameter '{prop.name}' must be a boolean, got '{value}'")

    def _coerce_json(self, prop: NodeProperty, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        if not value.strip():
            return {}
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise NodeOperationError(f"Parameter '{prop.name}' contains invalid JSON: {e}")
