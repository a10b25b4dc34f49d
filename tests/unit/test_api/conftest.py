"""
Shared fixtures for API tests
"""

import pytest
from fastapi.testclient import TestClient

from halo_engine.api.deps import get_db
from halo_engine.main import app

TENANT_HEADERS = {"X-Tenant-ID": "tenant-a"}


@pytest.fixture(scope="function")
def client(test_db):
    """Create test client with database override"""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def tenant_headers():
    return dict(TENANT_HEADERS)
