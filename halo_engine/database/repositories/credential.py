"""
Credential Repository

CRUD operations for tenant credentials. Encryption/decryption is
handled by the CredentialManager service.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from halo_engine.database.models.credential import TenantCredential

logger = logging.getLogger(__name__)


class CredentialRepository:
    """Repository for tenant credential database operations."""

    def __init__(self, db: Session):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create(
        self,
        tenant_id: str,
        name: str,
        service_type: str,
        encrypted_credentials: str,
    ) -> TenantCredential:
        """
        Create a new credential.

        Args:
            tenant_id: Owning tenant
            name: User-friendly name
            service_type: Service identifier (e.g., 'slack', 'google')
            encrypted_credentials: Encrypted JSON string

        Returns:
            Created TenantCredential
        """
        credential = TenantCredential(
            tenant_id=tenant_id,
            name=name,
            service_type=service_type,
            credentials=encrypted_credentials,
            is_active=True,
        )
        self.db.add(credential)
        self.db.commit()
        self.db.refresh(credential)

        logger.info(f"Created credential {credential.id} ({service_type}) for tenant {tenant_id}")
        return credential

    def get(self, credential_id: str, tenant_id: str) -> Optional[TenantCredential]:
        """Get a credential by id, scoped to its tenant."""
        return (
            self.db.query(TenantCredential)
            .filter(
                TenantCredential.id == credential_id,
                TenantCredential.tenant_id == tenant_id,
            )
            .first()
        )

    def list_by_tenant(self, tenant_id: str, include_inactive: bool = False) -> List[TenantCredential]:
        query = self.db.query(TenantCredential).filter(TenantCredential.tenant_id == tenant_id)
        if not include_inactive:
            query = query.filter(TenantCredential.is_active.is_(True))
        return query.order_by(TenantCredential.name).all()

    def list_active(self, tenant_id: str, service_type: str) -> List[TenantCredential]:
        """
        Active credentials for one tenant and service type, ordered by name.

        The ordering is the store's default ordering used for
        first-match credential selection.
        """
        return (
            self.db.query(TenantCredential)
            .filter(
                TenantCredential.tenant_id == tenant_id,
                TenantCredential.service_type == service_type,
                TenantCredential.is_active.is_(True),
            )
            .order_by(TenantCredential.name, TenantCredential.created_at)
            .all()
        )

    def deactivate(self, credential_id: str, tenant_id: str) -> bool:
        """
        Soft delete: mark the credential inactive.

        Returns:
            True if deactivated, False if not found
        """
        credential = self.get(credential_id, tenant_id)
        if not credential:
            return False

        credential.is_active = False
        self.db.commit()
        logger.info(f"Deactivated credential {credential_id} for tenant {tenant_id}")
        return True
