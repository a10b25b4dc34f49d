"""
Integration Catalog API Endpoints

GET /integrations - Every integration a workflow step may use
GET /integrations/{id} - One integration with its fields and endpoints
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from halo_engine.api.deps import get_catalog
from halo_engine.catalog import IntegrationCatalog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="List integrations",
    description="Node-backed and legacy integrations, normalized to one descriptor shape"
)
async def list_integrations(catalog: IntegrationCatalog = Depends(get_catalog)) -> Dict[str, Any]:
    integrations = [descriptor.model_dump(mode="json") for descriptor in catalog.list()]
    return {"integrations": integrations, "count": len(integrations)}


@router.get(
    "/{integration_id}",
    summary="Get integration",
)
async def get_integration(
    integration_id: str,
    catalog: IntegrationCatalog = Depends(get_catalog),
) -> Dict[str, Any]:
    descriptor = catalog.get(integration_id)
    if descriptor is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Integration '{integration_id}' not found"
        )
    return descriptor.model_dump(mode="json")
