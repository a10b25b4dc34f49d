"""
Configuration Management using Pydantic Settings

Infrastructure settings and secrets for the HALO engine, read from
environment variables (and an optional .env file).

Environment Variables (All Optional - Have Defaults):
    - DATABASE_URL: Database connection (defaults to SQLite)
    - ENCRYPTION_KEY: Key material for credential encryption (default provided for dev)
    - INTEGRATION_FUNCTION_URL: Remote integration function endpoint.
      When empty, steps are executed in-process against the node registry.

Recommended for Production:
    - Set ENCRYPTION_KEY in .env file
    - Point DATABASE_URL at PostgreSQL
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Infrastructure and secrets configuration.

    Loaded from environment variables only.
    """

    # Project Info
    PROJECT_NAME: str = "HALO Engine"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")
    API_V1_PREFIX: str = "/api/v1"

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///./halo.db",
        description="SQLAlchemy database URL"
    )
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: str = Field(default="logs")

    # Security
    ENCRYPTION_KEY: str = Field(
        default="dev-encryption-key-change-in-production",
        description="Key material for Fernet credential encryption"
    )

    # Integration execution
    INTEGRATION_FUNCTION_URL: str = Field(
        default="",
        description="Remote integration function URL (empty = execute nodes in-process)"
    )
    INTEGRATION_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout for outbound integration and node HTTP calls"
    )

    # Node registry
    NODE_ICON_URL_PREFIX: str = Field(
        default="/static/nodes",
        description="URL prefix under which node icon assets are served"
    )

    # Delay node: longest wait actually held in-process
    MAX_INLINE_DELAY_SECONDS: float = Field(default=0.0)

    # Workflow import
    MAX_IMPORT_FILE_BYTES: int = Field(default=10 * 1024 * 1024)

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the log level so it can be handed to logging directly."""
        return v.upper()

    @field_validator("NODE_ICON_URL_PREFIX", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
