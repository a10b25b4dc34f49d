"""
Workflow Model

Stores a tenant's workflow definition. The ``steps`` column holds either a
legacy ordered step list or a visual ``{"nodes": [...], "edges": [...]}``
document.
"""

import uuid
from sqlalchemy import Column, String, Text, DateTime, Index, JSON

from halo_engine.database.base import Base, get_current_timestamp


class Workflow(Base):
    """Workflow definition owned by exactly one tenant."""
    __tablename__ = "workflows"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False
    )
    tenant_id = Column(String(36), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Status: draft, active, paused
    status = Column(String(50), nullable=False, default="draft")

    steps = Column(JSON, nullable=False, default=list)

    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_current_timestamp, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_current_timestamp, onupdate=get_current_timestamp, nullable=False)

    __table_args__ = (
        Index('idx_workflows_tenant_name', 'tenant_id', 'name'),
    )

    def __repr__(self) -> str:
        return f"<Workflow(id={self.id}, name='{self.name}', tenant_id='{self.tenant_id}')>"
