"""
Workflow Execution Model

One run of a workflow, from trigger to completion or failure.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Index, JSON, ForeignKey
from sqlalchemy.orm import relationship

from halo_engine.database.base import Base, get_current_timestamp


class WorkflowExecution(Base):
    """
    Workflow execution run.

    Status moves running → completed or running → failed and never back.
    ``output`` is only written when the run completes.
    """
    __tablename__ = "workflow_executions"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False
    )
    workflow_id = Column(
        String(36),
        ForeignKey('workflows.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )
    tenant_id = Column(String(36), nullable=False, index=True)

    # Status: running, completed, failed
    status = Column(String(50), nullable=False, index=True)
    current_step = Column(String(255), nullable=True)

    input = Column(JSON, nullable=True)
    output = Column(JSON, nullable=True)

    started_at = Column(DateTime(timezone=True), default=get_current_timestamp, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=get_current_timestamp, onupdate=get_current_timestamp, nullable=False)

    logs = relationship(
        "ExecutionLog",
        back_populates="execution",
        order_by="ExecutionLog.sequence",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index('idx_executions_tenant_workflow', 'tenant_id', 'workflow_id'),
    )

    def __repr__(self) -> str:
        return f"<WorkflowExecution(id={self.id}, workflow_id={self.workflow_id}, status='{self.status}')>"
