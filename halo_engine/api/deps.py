"""
API Dependencies

Database sessions, the calling tenant and the shared engine components.
Tests swap any of these through ``app.dependency_overrides``.
"""

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from halo_engine.catalog import IntegrationCatalog, get_integration_catalog
from halo_engine.core.execution.engine import WorkflowExecutionService
from halo_engine.core.nodes.registry import NodeRegistry, get_node_registry
from halo_engine.database.session import get_db

__all__ = [
    "get_db",
    "get_tenant_id",
    "get_registry",
    "get_catalog",
    "get_execution_service",
]


def get_tenant_id(x_tenant_id: str = Header(..., alias="X-Tenant-ID")) -> str:
    """
    Tenant the request acts for, from the ``X-Tenant-ID`` header.

    Raises:
        HTTPException 400: Header present but blank
    """
    tenant_id = x_tenant_id.strip()
    if not tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header must not be empty",
        )
    return tenant_id


def get_registry() -> NodeRegistry:
    return get_node_registry()


def get_catalog() -> IntegrationCatalog:
    return get_integration_catalog()


def get_execution_service(
    db: Session = Depends(get_db),
    catalog: IntegrationCatalog = Depends(get_catalog),
) -> WorkflowExecutionService:
    return WorkflowExecutionService(db, catalog=catalog)
