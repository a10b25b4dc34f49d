"""Pytest fixtures and configuration."""

import os
import tempfile

# Set up test environment variables BEFORE any halo_engine imports
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key-32-characters!")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "halo-engine-test-logs"))
os.environ.setdefault("INTEGRATION_FUNCTION_URL", "")
os.environ.setdefault("MAX_INLINE_DELAY_SECONDS", "0")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from halo_engine.database import models  # noqa: F401 - register models
from halo_engine.database.base import Base


@pytest.fixture(scope="function")
def test_engine():
    """Create in-memory test database engine with shared connection"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Share connection across threads
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(test_engine):
    """Create test database session"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
