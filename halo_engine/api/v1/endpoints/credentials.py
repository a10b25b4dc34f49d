"""
Credential Management API Endpoints

Tenant-scoped credential storage. Secret values are accepted on create
and never returned.

Endpoints:
POST /credentials - Create new credential
GET /credentials - List the tenant's credentials
DELETE /credentials/{id} - Deactivate credential (soft delete)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from halo_engine.api.deps import get_db, get_tenant_id
from halo_engine.schemas.credential import CredentialCreate, CredentialResponse
from halo_engine.services.credential_manager import CredentialManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=CredentialResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new credential",
    description="Create a new credential with encrypted storage"
)
async def create_credential(
    credential: CredentialCreate,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """
    Create a new credential.

    The credential values are encrypted before storage.

    Args:
        credential: Credential creation data
        tenant_id: Owning tenant
        db: Database session

    Returns:
        Created credential (without secret values)

    Raises:
        HTTPException 422: If validation fails
        HTTPException 500: If creation fails
    """
    try:
        result = CredentialManager(db).create_credential(tenant_id, credential)
        logger.info(f"Tenant {tenant_id} created credential {result.id}")
        return result

    except ValueError as e:
        error_msg = str(e)
        logger.warning(f"Validation error creating credential: {error_msg}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_msg
        )
    except Exception as e:
        logger.error(f"Error creating credential: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create credential"
        )


@router.get(
    "",
    response_model=List[CredentialResponse],
    summary="List credentials",
)
async def list_credentials(
    include_inactive: bool = Query(False, description="Include deactivated credentials"),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    return CredentialManager(db).list_credentials(tenant_id, include_inactive=include_inactive)


@router.delete(
    "/{credential_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete credential",
    description="Deactivate a credential; it is no longer used by executions"
)
async def delete_credential(
    credential_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    if not CredentialManager(db).deactivate_credential(credential_id, tenant_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Credential {credential_id} not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
