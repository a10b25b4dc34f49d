"""Repositories wrapping a SQLAlchemy session."""

from halo_engine.database.repositories.workflow import WorkflowRepository
from halo_engine.database.repositories.execution import ExecutionRepository
from halo_engine.database.repositories.credential import CredentialRepository

__all__ = ["WorkflowRepository", "ExecutionRepository", "CredentialRepository"]
