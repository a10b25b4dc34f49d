"""
Node Registry API Endpoints

GET /nodes - List registered node types (sorted by display name)
GET /nodes/{name} - One node type with its parameters and icons
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from halo_engine.api.deps import get_registry
from halo_engine.core.nodes.registry import NodeRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="List node types",
    description="All registered node types, sorted by display name"
)
async def list_nodes(registry: NodeRegistry = Depends(get_registry)) -> Dict[str, Any]:
    nodes = registry.list_all()
    return {"nodes": nodes, "count": len(nodes)}


@router.get(
    "/{name}",
    summary="Get node type",
    description="Description, parameters and icons of one node type"
)
async def get_node(name: str, registry: NodeRegistry = Depends(get_registry)) -> Dict[str, Any]:
    """
    Look up a node type by its name.

    Raises:
        HTTPException 404: No node registered under this name
    """
    entry = registry.get_by_id(name)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Node type '{name}' not found"
        )
    return entry.to_dict()
