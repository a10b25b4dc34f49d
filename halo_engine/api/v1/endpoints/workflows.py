"""
Workflow API Endpoints

POST /workflows/{id}/execute - Run a workflow with a trigger payload
GET /workflows/{id}/export - Download a workflow as a portable JSON document
POST /workflows/import - Create a draft workflow from an uploaded document
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from halo_engine.api.deps import get_db, get_execution_service, get_tenant_id
from halo_engine.core.execution.engine import WorkflowExecutionService
from halo_engine.core.execution.exceptions import WorkflowNotFoundError, WorkflowValidationError
from halo_engine.schemas.workflow import (
    WorkflowExecutionRequest,
    WorkflowExecutionResult,
    WorkflowResponse,
)
from halo_engine.services.workflow_transfer import WorkflowImportError, WorkflowTransferService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{workflow_id}/execute",
    response_model=WorkflowExecutionResult,
    summary="Execute workflow",
    description="Run every step in order and wait for the run to finish"
)
async def execute_workflow(
    workflow_id: str,
    request: WorkflowExecutionRequest,
    tenant_id: str = Depends(get_tenant_id),
    service: WorkflowExecutionService = Depends(get_execution_service),
):
    """
    Execute a workflow synchronously.

    A failing step does not make the request fail: the run is recorded as
    ``failed`` and the outcome names the step and its error.

    Args:
        workflow_id: Workflow to run
        request: Trigger payload
        tenant_id: Calling tenant
        service: Execution service

    Returns:
        Execution outcome

    Raises:
        HTTPException 404: Workflow not found for this tenant
        HTTPException 422: Stored workflow cannot be parsed into steps
        HTTPException 500: Unexpected error
    """
    try:
        outcome = await service.execute_workflow(workflow_id, request.trigger_data, tenant_id)
        return WorkflowExecutionResult(
            execution_id=outcome.execution_id,
            status=outcome.status,
            output=outcome.output,
            error=outcome.error,
            failed_step=outcome.failed_step,
        )

    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WorkflowValidationError as e:
        logger.warning(f"Workflow {workflow_id} cannot be executed: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except Exception as e:
        logger.error(f"Error executing workflow {workflow_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to execute workflow"
        )


@router.get(
    "/{workflow_id}/export",
    summary="Export workflow",
)
async def export_workflow(
    workflow_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        return WorkflowTransferService(db).export_workflow(workflow_id, tenant_id)
    except WorkflowNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except WorkflowValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post(
    "/import",
    response_model=WorkflowResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import workflow",
    description="Create a draft workflow from an exported JSON document"
)
async def import_workflow(
    file: UploadFile = File(...),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Import a workflow file.

    The document is validated in full before anything is written; a name
    clash gets a "(Copy)" suffix.

    Raises:
        HTTPException 400: Wrong file type, too large or malformed document
    """
    content = await file.read()
    try:
        workflow = WorkflowTransferService(db).import_workflow_file(file.filename or "", content, tenant_id)
    except WorkflowImportError as e:
        logger.warning(f"Rejected workflow import '{file.filename}': {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return workflow
