"""Pydantic models for Member Import configuration.

These models define the structure of config.toml and secrets.env files.
"""

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    # CORS configuration - empty list means same-origin only
    cors_origins: list[str] = []


class DatabaseConfig(BaseModel):
    """MongoDB database configuration."""

    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "memberimport"
    # Connection pool settings
    min_pool_size: int = 10
    max_pool_size: int = 100


class StorageConfig(BaseModel):
    """Upload limits."""

    max_upload_mb: int = 10

    @property
    def max_upload_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_mb * 1024 * 1024


class ImportConfig(BaseModel):
    """Import pipeline tuning."""

    # Safety limit on rows per uploaded file (MongoDB 16MB doc size)
    max_rows: int = 5000
    # Pause between successive remote submissions
    submit_delay_ms: int = 100
    preview_rows: int = 5

    @property
    def submit_delay_seconds(self) -> float:
        """Get the submission delay in seconds."""
        return self.submit_delay_ms / 1000


class RemoteConfig(BaseModel):
    """Remote member-creation API configuration."""

    graphql_url: str = "http://localhost:4000/graphql"
    organisation_id: str | None = None
    branch_id: str | None = None
    timeout_seconds: float = 30.0


class MemberImportConfig(BaseModel):
    """Main Member Import configuration loaded from config.toml."""

    app_name: str = "Member Import"
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    importer: ImportConfig = Field(default_factory=ImportConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)


class SecretsConfig(BaseModel):
    """Secrets loaded from secrets.env file.

    These are sensitive values that should not be stored in config.toml.
    """

    api_token: str | None = None
