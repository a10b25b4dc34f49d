"""
API v1 Router
"""

from fastapi import APIRouter

from halo_engine.api.v1.endpoints import (
    credentials,
    executions,
    integrations,
    nodes,
    workflows,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(nodes.router, prefix="/nodes", tags=["Nodes"])
api_router.include_router(integrations.router, prefix="/integrations", tags=["Integrations"])
api_router.include_router(workflows.router, prefix="/workflows", tags=["Workflows"])
api_router.include_router(executions.router, prefix="/executions", tags=["Executions"])
api_router.include_router(credentials.router, prefix="/credentials", tags=["Credentials"])
