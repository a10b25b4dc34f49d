"""
Execution API Endpoints

GET /executions/{id} - Execution record with its ordered log stream
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from halo_engine.api.deps import get_db, get_tenant_id
from halo_engine.database.repositories.execution import ExecutionRepository
from halo_engine.schemas.workflow import ExecutionLogResponse, ExecutionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{execution_id}",
    response_model=ExecutionResponse,
    summary="Get execution",
)
async def get_execution(
    execution_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    repository = ExecutionRepository(db)
    execution = repository.get(execution_id, tenant_id)
    if execution is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Execution {execution_id} not found"
        )

    response = ExecutionResponse.model_validate(execution)
    response.logs = [ExecutionLogResponse.model_validate(log) for log in repository.list_logs(execution_id)]
    return response
