"""
Credential Manager Service

High-level tenant credential management with encryption/decryption support.
Also serves as the engine's credential store.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from halo_engine.core.execution.credentials import StoredCredential
from halo_engine.database.models.credential import TenantCredential
from halo_engine.database.repositories.credential import CredentialRepository
from halo_engine.schemas.credential import CredentialCreate, CredentialResponse
from halo_engine.security.encryption import decrypt_dict, encrypt_dict

logger = logging.getLogger(__name__)


class CredentialManager:
    """
    High-level credential management service.

    Secret values are encrypted before they reach the repository and are
    only decrypted for the execution engine, never for API responses.
    """

    def __init__(self, db: Session):
        """
        Initialize credential manager.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.repository = CredentialRepository(db)

    def create_credential(self, tenant_id: str, credential_data: CredentialCreate) -> CredentialResponse:
        """
        Create a new credential with encryption.

        Args:
            tenant_id: Owning tenant
            credential_data: Credential creation data

        Returns:
            CredentialResponse (without secret values)
        """
        credential = self.repository.create(
            tenant_id=tenant_id,
            name=credential_data.name,
            service_type=credential_data.service_type,
            encrypted_credentials=encrypt_dict(credential_data.credentials),
        )
        return CredentialResponse.model_validate(credential)

    def list_credentials(self, tenant_id: str, include_inactive: bool = False) -> List[CredentialResponse]:
        credentials = self.repository.list_by_tenant(tenant_id, include_inactive=include_inactive)
        return [CredentialResponse.model_validate(c) for c in credentials]

    def deactivate_credential(self, credential_id: str, tenant_id: str) -> bool:
        """Soft delete. Returns False if the credential does not exist for this tenant."""
        return self.repository.deactivate(credential_id, tenant_id)

    # ==================== Credential store (engine side) ====================

    def _to_stored(self, credential: TenantCredential) -> Optional[StoredCredential]:
        try:
            values = decrypt_dict(credential.credentials)
        except ValueError as e:
            logger.error(f"❌ Cannot decrypt credential {credential.id}: {e}")
            return None
        return StoredCredential(
            id=credential.id,
            name=credential.name,
            service_type=credential.service_type,
            values=values,
        )

    def list_active_credentials(self, tenant_id: str, service_type: str) -> List[StoredCredential]:
        """Decrypted active credentials, in the repository's name ordering."""
        stored = [self._to_stored(c) for c in self.repository.list_active(tenant_id, service_type)]
        return [credential for credential in stored if credential is not None]

    def get_credential(self, tenant_id: str, credential_id: str) -> Optional[StoredCredential]:
        """Decrypted credential by id; inactive or foreign-tenant credentials are not returned."""
        credential = self.repository.get(credential_id, tenant_id)
        if credential is None or not credential.is_active:
            return None
        return self._to_stored(credential)
