"""
Unit tests for credential resolution

Tests:
- Integration → service type mapping
- Per-run caching and explicit credential binding
- Tenant isolation through the database-backed CredentialManager
"""

import pytest

from halo_engine.core.execution.credentials import (
    CredentialResolver,
    StoredCredential,
    service_type_for,
)
from halo_engine.schemas.credential import CredentialCreate
from halo_engine.services.credential_manager import CredentialManager


class MemoryStore:
    def __init__(self, credentials):
        self.credentials = credentials
        self.list_calls = 0

    def list_active_credentials(self, tenant_id, service_type):
        self.list_calls += 1
        return [
            c for tenant, c in self.credentials
            if tenant == tenant_id and c.service_type == service_type
        ]

    def get_credential(self, tenant_id, credential_id):
        for tenant, credential in self.credentials:
            if tenant == tenant_id and credential.id == credential_id:
                return credential
        return None


class AsyncMemoryStore(MemoryStore):
    async def list_active_credentials(self, tenant_id, service_type):
        return MemoryStore.list_active_credentials(self, tenant_id, service_type)

    async def get_credential(self, tenant_id, credential_id):
        return MemoryStore.get_credential(self, tenant_id, credential_id)


def google(credential_id, token, name="Google"):
    return StoredCredential(id=credential_id, name=name, service_type="google", values={"accessToken": token})


class TestServiceTypes:

    @pytest.mark.parametrize("integration_id,service_type", [
        ("gmail", "google"),
        ("sesEmail", "aws"),
        ("aws-ses", "aws"),
        ("notionDatabase", "notion"),
        ("claude-agent", "anthropic"),
        ("condition", None),
        ("httpRequest", None),
    ])
    def test_mapping(self, integration_id, service_type):
        assert service_type_for(integration_id) == service_type


class TestCredentialResolver:

    @pytest.mark.asyncio
    async def test_no_service_type(self):
        store = MemoryStore([])

        assert await CredentialResolver(store, "t1").resolve("condition") == {}
        assert store.list_calls == 0

    @pytest.mark.asyncio
    async def test_no_store(self):
        assert await CredentialResolver(None, "t1").resolve("gmail") == {}

    @pytest.mark.asyncio
    async def test_first_active_credential(self):
        store = MemoryStore([("t1", google("c1", "first")), ("t1", google("c2", "second"))])

        assert await CredentialResolver(store, "t1").resolve("gmail") == {"accessToken": "first"}

    @pytest.mark.asyncio
    async def test_cached_per_run(self):
        store = MemoryStore([("t1", google("c1", "token"))])
        resolver = CredentialResolver(store, "t1")

        await resolver.resolve("gmail")
        await resolver.resolve("email_trigger")

        assert store.list_calls == 1

    @pytest.mark.asyncio
    async def test_returned_bundle_is_a_copy(self):
        store = MemoryStore([("t1", google("c1", "token"))])
        resolver = CredentialResolver(store, "t1")

        bundle = await resolver.resolve("gmail")
        bundle["accessToken"] = "changed"

        assert await resolver.resolve("gmail") == {"accessToken": "token"}

    @pytest.mark.asyncio
    async def test_explicit_credential_id(self):
        store = MemoryStore([("t1", google("c1", "first")), ("t1", google("c2", "second"))])

        assert await CredentialResolver(store, "t1").resolve("gmail", "c2") == {"accessToken": "second"}

    @pytest.mark.asyncio
    async def test_explicit_credential_of_wrong_service_falls_back(self):
        slack = StoredCredential(id="s1", name="Slack", service_type="slack", values={"botToken": "x"})
        store = MemoryStore([("t1", google("c1", "first")), ("t1", slack)])

        assert await CredentialResolver(store, "t1").resolve("gmail", "s1") == {"accessToken": "first"}

    @pytest.mark.asyncio
    async def test_never_crosses_tenants(self):
        store = MemoryStore([("t1", google("c1", "tenant-one-token"))])

        assert await CredentialResolver(store, "t2").resolve("gmail") == {}
        assert await CredentialResolver(store, "t2").resolve("gmail", "c1") == {}

    @pytest.mark.asyncio
    async def test_async_store(self):
        store = AsyncMemoryStore([("t1", google("c1", "token"))])

        assert await CredentialResolver(store, "t1").resolve("gmail") == {"accessToken": "token"}


class TestCredentialManagerStore:
    """Encrypted storage as the resolver's backing store"""

    @pytest.mark.asyncio
    async def test_tenant_isolation(self, test_db):
        manager = CredentialManager(test_db)
        created = manager.create_credential(
            "tenant-a",
            CredentialCreate(name="Work Gmail", service_type="Google", credentials={"accessToken": "secret-a"}),
        )

        assert created.service_type == "google"
        assert await CredentialResolver(manager, "tenant-a").resolve("gmail") == {"accessToken": "secret-a"}
        assert await CredentialResolver(manager, "tenant-b").resolve("gmail") == {}
        assert manager.get_credential("tenant-b", created.id) is None

    def test_secret_values_are_encrypted_at_rest(self, test_db):
        manager = CredentialManager(test_db)
        created = manager.create_credential(
            "tenant-a",
            CredentialCreate(name="Slack", service_type="slack", credentials={"botToken": "xoxb-secret"}),
        )

        stored = manager.repository.get(created.id, "tenant-a")
        assert "xoxb-secret" not in stored.credentials

    def test_deactivated_credentials_are_not_used(self, test_db):
        manager = CredentialManager(test_db)
        created = manager.create_credential(
            "tenant-a",
            CredentialCreate(name="Slack", service_type="slack", credentials={"botToken": "x"}),
        )

        assert manager.deactivate_credential(created.id, "tenant-a") is True
        assert manager.list_active_credentials("tenant-a", "slack") == []
        assert manager.get_credential("tenant-a", created.id) is None
        assert manager.deactivate_credential(created.id, "tenant-b") is False
        assert [c.id for c in manager.list_credentials("tenant-a", include_inactive=True)] == [created.id]
