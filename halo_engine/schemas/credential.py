"""
Credential Schemas
"""

from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CredentialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    service_type: str = Field(..., min_length=1, max_length=100)
    credentials: Dict[str, str] = Field(default_factory=dict)

    @field_validator("service_type")
    @classmethod
    def normalize_service_type(cls, v: str) -> str:
        return v.strip().lower()


class CredentialResponse(BaseModel):
    """Credential without its secret values."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    name: str
    service_type: str
    is_active: bool
    created_at: datetime
