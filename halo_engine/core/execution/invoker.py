"""
Integration Invokers

Run one step's integration logic and report ``{success, output, error, logs}``.

- NodeInvoker: executes registered nodes in-process
- RemoteFunctionInvoker: POSTs the invocation to the integration function
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from halo_engine.catalog import IntegrationCatalog, get_integration_catalog
from halo_engine.config import settings
from halo_engine.core.execution.context import NodeExecuteContext, RequestHelpers
from halo_engine.core.execution.exceptions import NodeOperationError
from halo_engine.core.nodes.base import NodeExecutionData, to_step_output
from halo_engine.core.nodes.registry import NodeRegistry, get_node_registry

logger = logging.getLogger(__name__)


@dataclass
class InvocationContext:
    """Everything an integration sees about the run and the step."""
    workflow_id: str
    execution_id: str
    step_id: str
    tenant_id: str
    trigger_data: Dict[str, Any] = field(default_factory=dict)
    credentials: Dict[str, Any] = field(default_factory=dict)
    previous_step_outputs: Dict[str, Any] = field(default_factory=dict)
    input_items: List[NodeExecutionData] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Wire form sent to the remote integration function."""
        return {
            "workflowId": self.workflow_id,
            "executionId": self.execution_id,
            "stepId": self.step_id,
            "tenantId": self.tenant_id,
            "triggerData": self.trigger_data,
            "credentials": self.credentials,
            "previousStepOutputs": self.previous_step_outputs,
            "inputItems": [item.to_dict() for item in self.input_items],
        }


@dataclass
class InvocationResult:
    success: bool
    output: Any = None
    error: Optional[str] = None
    logs: List[Any] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str) -> "InvocationResult":
        return cls(success=False, error=error)

    @classmethod
    def from_response(cls, body: Any) -> "InvocationResult":
        """Parse the remote function's JSON body."""
        if not isinstance(body, dict):
            return cls.failure("Integration function returned an unexpected response")
        logs = body.get("logs") or []
        return cls(
            success=bool(body.get("success")),
            output=body.get("output"),
            error=body.get("error"),
            logs=logs if isinstance(logs, list) else [logs],
        )


class IntegrationInvoker(ABC):
    """Runs one integration call for the engine."""

    @abstractmethod
    async def invoke(
        self,
        integration_id: str,
        endpoint_id: Optional[str],
        config: Dict[str, Any],
        context: InvocationContext,
    ) -> InvocationResult:
        """
        Execute ``integration_id`` for one step.

        Failures are reported through ``success=False``; implementations
        only raise for programming errors.
        """


def endpoint_operation(endpoint_id: str) -> str:
    """Endpoint ids are kebab-case; node operations are camelCase."""
    head, *rest = endpoint_id.split("-")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


class NodeInvoker(IntegrationInvoker):
    """
    In-process invoker over the node registry.

    Catalog entries with no executable node produce a failed result
    rather than raising.
    """

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        catalog: Optional[IntegrationCatalog] = None,
        helpers: Optional[RequestHelpers] = None,
    ):
        if registry is None and catalog is None:
            catalog = get_integration_catalog()
        if registry is None:
            registry = catalog.registry if catalog is not None else get_node_registry()
        self.registry = registry
        self.catalog = catalog if catalog is not None else IntegrationCatalog(registry)
        self.helpers = helpers or RequestHelpers()

    async def invoke(
        self,
        integration_id: str,
        endpoint_id: Optional[str],
        config: Dict[str, Any],
        context: InvocationContext,
    ) -> InvocationResult:
        descriptor = self.catalog.get(integration_id)
        node_name = descriptor.node_name if descriptor and descriptor.node_name else integration_id
        entry = self.registry.get_by_id(node_name)

        if entry is None:
            if descriptor is not None:
                return InvocationResult.failure(f"No executable logic for integration: {integration_id}")
            return InvocationResult.failure(f"Integration not found for step type: {integration_id}")

        description = entry.description
        parameters = descriptor.normalize_config(config) if descriptor else dict(config)

        operation = description.get_property("operation")
        if endpoint_id and operation is not None and "operation" not in parameters:
            candidate = endpoint_operation(endpoint_id)
            if candidate in operation.option_values():
                parameters["operation"] = candidate

        credentials = {}
        if context.credentials:
            credentials = {req.name: dict(context.credentials) for req in description.credentials}

        node_context = NodeExecuteContext(
            description=description,
            parameters=parameters,
            input_items=context.input_items,
            credentials=credentials,
            helpers=self.helpers,
            step_id=context.step_id,
            tenant_id=context.tenant_id,
        )

        try:
            outputs = await entry.node.execute(node_context)
            output = to_step_output(description.outputs, outputs)
        except NodeOperationError as e:
            logger.error(f"❌ Node '{node_name}' failed in step {context.step_id}: {e}")
            return InvocationResult.failure(str(e))
        except Exception as e:
            logger.error(f"❌ Node '{node_name}' raised in step {context.step_id}: {e}", exc_info=True)
            return InvocationResult.failure(str(e) or type(e).__name__)

        return InvocationResult(success=True, output=output)


class RemoteFunctionInvoker(IntegrationInvoker):
    """
    Delegates execution to the remote integration function over HTTP.

    Args:
        function_url: Endpoint receiving ``{integrationId, endpointId, config, context}``
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        function_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.function_url = function_url or settings.INTEGRATION_FUNCTION_URL
        if not self.function_url:
            raise ValueError("INTEGRATION_FUNCTION_URL is not configured")
        self.timeout = timeout if timeout is not None else settings.INTEGRATION_TIMEOUT_SECONDS
        self._transport = transport

    async def invoke(
        self,
        integration_id: str,
        endpoint_id: Optional[str],
        config: Dict[str, Any],
        context: InvocationContext,
    ) -> InvocationResult:
        payload = {
            "integrationId": integration_id,
            "endpointId": endpoint_id,
            "config": config,
            "context": context.to_payload(),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.function_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"❌ Integration function call failed for {integration_id}: {e}")
            return InvocationResult.failure(f"Integration function request failed: {e}")

        if response.status_code >= 400:
            return InvocationResult.failure(
                f"Integration function returned {response.status_code}: {response.text[:300]}"
            )

        try:
            body = response.json()
        except ValueError:
            return InvocationResult.failure("Integration function returned invalid JSON")

        return InvocationResult.from_response(body)


def default_invoker() -> IntegrationInvoker:
    """Remote invoker when INTEGRATION_FUNCTION_URL is set, else in-process nodes."""
    if settings.INTEGRATION_FUNCTION_URL:
        return RemoteFunctionInvoker()
    return NodeInvoker()
