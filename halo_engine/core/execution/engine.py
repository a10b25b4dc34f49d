"""
Workflow Execution Service

Walks a workflow's steps in order, one at a time:

1. Create the execution record (``running``, trigger payload as input)
2. For each step: mark it current, resolve its config and credentials,
   invoke its integration and record the output
3. The first failing step marks the run ``failed`` and stops it
4. When every step has run the outputs are persisted and the run is ``completed``

There are no retries and no partial output: ``output`` is written only on
completion. Steps whose upstream produced no items are skipped, not failed.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from halo_engine.catalog import IntegrationCatalog, get_integration_catalog
from halo_engine.core.execution.context import TRIGGER_STEP_ID, ExecutionContext
from halo_engine.core.execution.credentials import CredentialResolver, CredentialStore
from halo_engine.core.execution.exceptions import (
    ExecutionCancelledError,
    HaloError,
    IntegrationNotFoundError,
    StepFailedError,
    WorkflowNotFoundError,
)
from halo_engine.core.execution.flatten import parse_steps
from halo_engine.core.execution.invoker import (
    IntegrationInvoker,
    InvocationContext,
    InvocationResult,
    default_invoker,
)
from halo_engine.core.nodes.base import NodeExecutionData
from halo_engine.core.nodes.variables import resolve_config
from halo_engine.database.repositories.execution import ExecutionRepository
from halo_engine.database.repositories.workflow import WorkflowRepository
from halo_engine.schemas.workflow import ExecutionStatus, LogLevel, StepInput, WorkflowStep
from halo_engine.utils.timezone import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ExecutionOutcome:
    """What a finished run reports back to its caller."""
    execution_id: str
    status: ExecutionStatus
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    failed_step: Optional[str] = None


class WorkflowExecutionService:
    """
    Sequential, fail-fast workflow runner.

    Args:
        db: Session used for workflow and execution records
        invoker: Integration invoker (default: remote function if configured,
            else in-process nodes)
        catalog: Integration catalog used to validate step types
        credential_store: Store queried for step credentials (default:
            CredentialManager on ``db``)
    """

    def __init__(
        self,
        db: Session,
        invoker: Optional[IntegrationInvoker] = None,
        catalog: Optional[IntegrationCatalog] = None,
        credential_store: Optional[CredentialStore] = None,
    ):
        self.db = db
        self.workflows = WorkflowRepository(db)
        self.executions = ExecutionRepository(db)
        self.invoker = invoker or default_invoker()
        self.catalog = catalog or get_integration_catalog()
        if credential_store is None:
            from halo_engine.services.credential_manager import CredentialManager
            credential_store = CredentialManager(db)
        self.credential_store = credential_store

    async def execute_workflow(
        self,
        workflow_id: str,
        trigger_data: Optional[Dict[str, Any]],
        tenant_id: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionOutcome:
        """
        Load a tenant's workflow and run it.

        Raises:
            WorkflowNotFoundError: No such workflow for this tenant
            WorkflowValidationError: Stored steps cannot be flattened
        """
        workflow = self.workflows.get(workflow_id, tenant_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        steps = parse_steps(workflow.steps or [])
        return await self.execute_steps(workflow.id, steps, trigger_data, tenant_id, cancel_event)

    async def execute_steps(
        self,
        workflow_id: str,
        steps: List[WorkflowStep],
        trigger_data: Optional[Dict[str, Any]],
        tenant_id: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionOutcome:
        """Run an already parsed step list and record the execution."""
        trigger_data = dict(trigger_data or {})
        execution = self.executions.create(workflow_id, tenant_id, input_data=trigger_data)
        execution_id = execution.id

        context = ExecutionContext(
            workflow_id=workflow_id,
            execution_id=execution_id,
            tenant_id=tenant_id,
            trigger_data=trigger_data,
            cancel_event=cancel_event,
        )
        resolver = CredentialResolver(self.credential_store, tenant_id)

        logger.info(f"🚀 Executing workflow {workflow_id} ({len(steps)} steps), execution {execution_id}")

        default_source = TRIGGER_STEP_ID
        for step in steps:
            try:
                if context.is_cancelled():
                    raise ExecutionCancelledError(f"Execution cancelled before step {step.id}")
                self._set_current_step(execution_id, step.id)
                await self._run_step(step, default_source, context, resolver)
            except ExecutionCancelledError:
                return self._finish_cancelled(execution_id, step.id)
            except HaloError as e:
                return self._finish_failed(execution_id, step.id, str(e))
            except Exception as e:
                logger.error(f"❌ Unexpected error in step {step.id}: {e}", exc_info=True)
                return self._finish_failed(execution_id, step.id, str(e) or type(e).__name__)
            default_source = step.id

        output = context.snapshot_outputs()
        self.executions.update(execution_id, {
            "status": ExecutionStatus.COMPLETED.value,
            "output": output,
            "completed_at": utc_now(),
        })
        logger.info(f"✅ Execution {execution_id} completed")
        return ExecutionOutcome(execution_id=execution_id, status=ExecutionStatus.COMPLETED, output=output)

    async def _run_step(
        self,
        step: WorkflowStep,
        default_source: str,
        context: ExecutionContext,
        resolver: CredentialResolver,
    ) -> None:
        if step.type not in self.catalog:
            raise IntegrationNotFoundError(step.type)

        input_items = self._collect_inputs(step, default_source, context)
        if not input_items:
            context.record_skip(step.id)
            self.executions.append_log(
                context.execution_id, step.id, LogLevel.INFO.value, "Step skipped",
                {"type": step.type, "reason": "no input items"},
            )
            logger.info(f"⏭️ Step {step.id} skipped (no input items)")
            return

        config = resolve_config(step.config, context.step_outputs)
        credentials = await resolver.resolve(step.type, config.get("credentialId"))
        endpoint_id = self.catalog.resolve_endpoint(step.type, config)

        invocation = InvocationContext(
            workflow_id=context.workflow_id,
            execution_id=context.execution_id,
            step_id=step.id,
            tenant_id=context.tenant_id,
            trigger_data=context.trigger_data,
            credentials=credentials,
            previous_step_outputs=context.snapshot_outputs(),
            input_items=input_items,
        )

        logger.info(f"▶️ Step {step.id} ({step.type}, endpoint {endpoint_id})")
        result: InvocationResult = await self.invoker.invoke(step.type, endpoint_id, config, invocation)
        if not result.success:
            raise StepFailedError(result.error or f"Step {step.id} failed")

        context.record_output(step.id, result.output)
        data: Dict[str, Any] = {"type": step.type, "endpoint": endpoint_id}
        if result.logs:
            data["logs"] = result.logs
        self.executions.append_log(context.execution_id, step.id, LogLevel.INFO.value, "Step executed", data)

    @staticmethod
    def _collect_inputs(
        step: WorkflowStep,
        default_source: str,
        context: ExecutionContext,
    ) -> List[NodeExecutionData]:
        links = step.inputs or [StepInput(source=default_source)]
        items: List[NodeExecutionData] = []
        for link in links:
            items.extend(context.get_input_items(link.source, link.channel))
        return items

    def _set_current_step(self, execution_id: str, step_id: str) -> None:
        """Best effort: a failed progress write does not stop the run."""
        try:
            self.executions.update(execution_id, {"current_step": step_id})
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Could not record current step {step_id} for {execution_id}: {e}")

    def _finish_failed(self, execution_id: str, step_id: str, error: str) -> ExecutionOutcome:
        self.executions.append_log(execution_id, step_id, LogLevel.ERROR.value, error)
        self.executions.update(execution_id, {
            "status": ExecutionStatus.FAILED.value,
            "completed_at": utc_now(),
        })
        logger.error(f"❌ Execution {execution_id} failed at step {step_id}: {error}")
        return ExecutionOutcome(
            execution_id=execution_id,
            status=ExecutionStatus.FAILED,
            error=error,
            failed_step=step_id,
        )

    def _finish_cancelled(self, execution_id: str, step_id: str) -> ExecutionOutcome:
        self.executions.append_log(execution_id, step_id, LogLevel.WARNING.value, "Execution cancelled")
        self.executions.update(execution_id, {
            "status": ExecutionStatus.FAILED.value,
            "completed_at": utc_now(),
        })
        logger.warning(f"⚠️ Execution {execution_id} cancelled before step {step_id}")
        return ExecutionOutcome(
            execution_id=execution_id,
            status=ExecutionStatus.FAILED,
            error="Execution cancelled",
            failed_step=step_id,
        )
