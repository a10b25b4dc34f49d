"""
Workflow Repository

Tenant-scoped access to workflow definitions.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from halo_engine.database.models.workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowRepository:
    """Repository for workflow database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, workflow_id: str, tenant_id: Optional[str] = None) -> Optional[Workflow]:
        """
        Get a workflow by id.

        Args:
            workflow_id: Workflow ID
            tenant_id: When given, the workflow must belong to this tenant

        Returns:
            Workflow or None if not found
        """
        query = self.db.query(Workflow).filter(Workflow.id == workflow_id)
        if tenant_id is not None:
            query = query.filter(Workflow.tenant_id == tenant_id)
        return query.first()

    def list_by_tenant(self, tenant_id: str) -> List[Workflow]:
        return (
            self.db.query(Workflow)
            .filter(Workflow.tenant_id == tenant_id)
            .order_by(Workflow.name)
            .all()
        )

    def list_names(self, tenant_id: str) -> List[str]:
        """All workflow names for a tenant (used for unique naming)."""
        rows = self.db.query(Workflow.name).filter(Workflow.tenant_id == tenant_id).all()
        return [row[0] for row in rows]

    def create(
        self,
        tenant_id: str,
        name: str,
        steps: Any,
        description: Optional[str] = None,
        status: str = "draft",
        created_by: Optional[str] = None,
    ) -> Workflow:
        workflow = Workflow(
            tenant_id=tenant_id,
            name=name,
            description=description,
            steps=steps,
            status=status,
            created_by=created_by,
        )
        self.db.add(workflow)
        self.db.commit()
        self.db.refresh(workflow)

        logger.info(f"Created workflow {workflow.id} '{name}' for tenant {tenant_id}")
        return workflow

    def update(self, workflow_id: str, patch: Dict[str, Any]) -> Optional[Workflow]:
        """
        Apply a partial update.

        Returns:
            Updated workflow or None if not found
        """
        workflow = self.get(workflow_id)
        if not workflow:
            return None

        for key, value in patch.items():
            if not hasattr(workflow, key):
                raise ValueError(f"Unknown workflow field: {key}")
            setattr(workflow, key, value)

        self.db.commit()
        self.db.refresh(workflow)
        return workflow
