"""
Execution Log Model

Append-only audit trail of step outcomes for a workflow execution.
"""

import uuid
from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey, Text
from sqlalchemy.orm import relationship

from halo_engine.database.base import Base, get_current_timestamp


class ExecutionLog(Base):
    """One log row per step outcome. Rows are never edited after insert."""
    __tablename__ = "execution_logs"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False
    )
    execution_id = Column(
        String(36),
        ForeignKey('workflow_executions.id', ondelete='CASCADE'),
        nullable=False,
        index=True
    )

    # Insertion order within the execution
    sequence = Column(Integer, nullable=False, default=0)

    step_id = Column(String(255), nullable=True, index=True)

    # Log level: info, warning, error
    level = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), default=get_current_timestamp, nullable=False)

    execution = relationship("WorkflowExecution", back_populates="logs")

    def __repr__(self) -> str:
        return f"<ExecutionLog(execution_id={self.execution_id}, step_id={self.step_id}, level='{self.level}')>"
