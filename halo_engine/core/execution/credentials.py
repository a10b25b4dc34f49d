"""
Credential Resolution

Maps an integration id to a service type and fetches the tenant's active
credential bundle for it. Bundles are cached per run so a workflow with
several steps on the same service queries the store once.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


# Integration id (node name or legacy id) → credential service type
SERVICE_TYPE_BY_INTEGRATION: Dict[str, str] = {
    "gmail": "google",
    "email_trigger": "google",
    "slack": "slack",
    "hubspot": "hubspot",
    "salesforce": "salesforce",
    "pipedrive": "pipedrive",
    "notionDatabase": "notion",
    "sesEmail": "aws",
    "aws-ses": "aws",
    "sendgrid": "sendgrid",
    "openai-agent": "openai",
    "openai-llm": "openai",
    "ai-tool": "openai",
    "claude-agent": "anthropic",
    "claude-llm": "anthropic",
}


def service_type_for(integration_id: str) -> Optional[str]:
    """Service type for an integration, or None when it needs no credentials."""
    return SERVICE_TYPE_BY_INTEGRATION.get(integration_id)


@dataclass
class StoredCredential:
    """A decrypted credential as handed out by a credential store."""
    id: str
    name: str
    service_type: str
    values: Dict[str, Any] = field(default_factory=dict)


class CredentialStore(Protocol):
    """
    Read side of the credential store.

    Methods may be plain or async.
    """

    def list_active_credentials(self, tenant_id: str, service_type: str) -> List[StoredCredential]:
        ...

    def get_credential(self, tenant_id: str, credential_id: str) -> Optional[StoredCredential]:
        ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CredentialResolver:
    """
    Per-run credential lookup for one tenant.

    Args:
        store: Credential store; None means every lookup resolves to ``{}``
        tenant_id: The run's tenant. Lookups never cross tenants.
    """

    def __init__(self, store: Optional[CredentialStore], tenant_id: str):
        self.store = store
        self.tenant_id = tenant_id
        self._cache: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def resolve(self, integration_id: str, credential_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Credential bundle for an integration.

        Args:
            integration_id: Step type
            credential_id: Explicit credential to bind; must belong to the
                run's tenant and be active

        Returns:
            The bundle, or ``{}`` when the integration has no service type
            or the tenant has no active credential for it
        """
        service_type = service_type_for(integration_id)
        if service_type is None or self.store is None:
            return {}

        cache_key = (service_type, credential_id or "")
        async with self._lock:
            if cache_key in self._cache:
                return dict(self._cache[cache_key])

            bundle = await self._lookup(service_type, credential_id)
            self._cache[cache_key] = bundle
            return dict(bundle)

    async def _lookup(self, service_type: str, credential_id: Optional[str]) -> Dict[str, Any]:
        if credential_id:
            credential = await _maybe_await(self.store.get_credential(self.tenant_id, credential_id))
            if credential is None or credential.service_type != service_type:
                logger.warning(
                    f"⚠️ Credential {credential_id} not usable for {service_type} "
                    f"(tenant {self.tenant_id}), falling back to default"
                )
            else:
                return dict(credential.values)

        credentials = await _maybe_await(self.store.list_active_credentials(self.tenant_id, service_type))
        if not credentials:
            logger.debug(f"No active {service_type} credential for tenant {self.tenant_id}")
            return {}

        if len(credentials) > 1:
            logger.warning(
                f"⚠️ {len(credentials)} active {service_type} credentials for tenant "
                f"{self.tenant_id}, using '{credentials[0].name}'"
            )
        return dict(credentials[0].values)
