"""Database models."""

from halo_engine.database.models.workflow import Workflow
from halo_engine.database.models.execution import WorkflowExecution
from halo_engine.database.models.execution_log import ExecutionLog
from halo_engine.database.models.credential import TenantCredential

__all__ = [
    "Workflow",
    "WorkflowExecution",
    "ExecutionLog",
    "TenantCredential",
]
