"""
Tenant Credential Model

Named, tenant-scoped secret bundles used by steps to authenticate
against external services.
"""

import uuid
from sqlalchemy import Column, String, Text, DateTime, Index, Boolean

from halo_engine.database.base import Base, get_current_timestamp


class TenantCredential(Base):
    """
    Encrypted credential bundle.

    Security:
        - ``credentials`` holds the Fernet-encrypted JSON key→value map
        - Encryption handled by CredentialManager service

    Example:
        name: "Marketing Gmail"
        service_type: "google"
        credentials: {"accessToken": "ya29..."}  # Encrypted
    """
    __tablename__ = "tenant_credentials"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        nullable=False
    )
    tenant_id = Column(String(36), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    service_type = Column(String(100), nullable=False, index=True)

    credentials = Column(Text, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=get_current_timestamp, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_current_timestamp, onupdate=get_current_timestamp, nullable=False)

    __table_args__ = (
        Index('idx_tenant_credentials_lookup', 'tenant_id', 'service_type', 'is_active'),
    )

    def __repr__(self) -> str:
        return f"<TenantCredential(id={self.id}, name='{self.name}', service_type='{self.service_type}')>"
