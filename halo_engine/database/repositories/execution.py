"""
Execution Repository

Execution records and their append-only log stream.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from halo_engine.database.models.execution import WorkflowExecution
from halo_engine.database.models.execution_log import ExecutionLog
from halo_engine.utils.timezone import utc_now

logger = logging.getLogger(__name__)


class ExecutionRepository:
    """Repository for workflow execution records and logs."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        workflow_id: str,
        tenant_id: str,
        input_data: Optional[Dict[str, Any]] = None,
        status: str = "running",
    ) -> WorkflowExecution:
        execution = WorkflowExecution(
            workflow_id=workflow_id,
            tenant_id=tenant_id,
            status=status,
            input=input_data,
            started_at=utc_now(),
        )
        self.db.add(execution)
        self.db.commit()
        self.db.refresh(execution)
        return execution

    def get(self, execution_id: str, tenant_id: Optional[str] = None) -> Optional[WorkflowExecution]:
        query = self.db.query(WorkflowExecution).filter(WorkflowExecution.id == execution_id)
        if tenant_id is not None:
            query = query.filter(WorkflowExecution.tenant_id == tenant_id)
        return query.first()

    def list_by_workflow(self, workflow_id: str, tenant_id: str) -> List[WorkflowExecution]:
        return (
            self.db.query(WorkflowExecution)
            .filter(
                WorkflowExecution.workflow_id == workflow_id,
                WorkflowExecution.tenant_id == tenant_id,
            )
            .order_by(WorkflowExecution.started_at.desc())
            .all()
        )

    def update(self, execution_id: str, patch: Dict[str, Any]) -> Optional[WorkflowExecution]:
        """
        Patch status, current_step, output or completed_at.

        Returns:
            Updated execution or None if not found
        """
        execution = self.get(execution_id)
        if not execution:
            return None

        for key, value in patch.items():
            setattr(execution, key, value)
        execution.updated_at = utc_now()

        self.db.commit()
        return execution

    def append_log(
        self,
        execution_id: str,
        step_id: Optional[str],
        level: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> ExecutionLog:
        """Append one row to the execution's audit trail."""
        last = (
            self.db.query(func.max(ExecutionLog.sequence))
            .filter(ExecutionLog.execution_id == execution_id)
            .scalar()
        )
        entry = ExecutionLog(
            execution_id=execution_id,
            sequence=(last or 0) + 1,
            step_id=step_id,
            level=level,
            message=message,
            data=data,
            timestamp=utc_now(),
        )
        self.db.add(entry)
        self.db.commit()
        return entry

    def list_logs(self, execution_id: str) -> List[ExecutionLog]:
        return (
            self.db.query(ExecutionLog)
            .filter(ExecutionLog.execution_id == execution_id)
            .order_by(ExecutionLog.sequence)
            .all()
        )
