"""Global settings instance for Member Import.

This module provides a unified settings object that combines:
- Configuration from config.toml
- Secrets from secrets.env
- Environment variable overrides

The settings object provides a flat interface over the structured
configuration.
"""

import logging

from memberimport.config.loader import load_config, load_secrets
from memberimport.config.schema import MemberImportConfig, SecretsConfig

logger = logging.getLogger(__name__)


class Settings:
    """Unified settings object combining config and secrets."""

    def __init__(
        self,
        config: MemberImportConfig | None = None,
        secrets: SecretsConfig | None = None,
    ):
        """Initialize settings.

        Args:
            config: Optional MemberImportConfig instance. If not provided, loads from file.
            secrets: Optional SecretsConfig instance. If not provided, loads from file.
        """
        self._config = config or load_config()
        self._secrets = secrets or load_secrets()

        if not self._secrets.api_token:
            logger.warning(
                "No API token configured for the member API. "
                "Set MEMBERIMPORT_API_TOKEN before processing imports."
            )

    # =========================================================================
    # Config accessors
    # =========================================================================

    @property
    def config(self) -> MemberImportConfig:
        """Get the full configuration object."""
        return self._config

    @property
    def secrets(self) -> SecretsConfig:
        """Get the secrets configuration object."""
        return self._secrets

    # =========================================================================
    # Flat property interface
    # =========================================================================

    # Application
    @property
    def app_name(self) -> str:
        return self._config.app_name

    @property
    def debug(self) -> bool:
        return self._config.server.debug

    # Server
    @property
    def host(self) -> str:
        return self._config.server.host

    @property
    def port(self) -> int:
        return self._config.server.port

    @property
    def cors_origins(self) -> list[str]:
        return self._config.server.cors_origins

    # Database
    @property
    def mongodb_url(self) -> str:
        return self._config.database.mongodb_url

    @property
    def mongodb_database(self) -> str:
        return self._config.database.mongodb_database

    @property
    def min_pool_size(self) -> int:
        return self._config.database.min_pool_size

    @property
    def max_pool_size(self) -> int:
        return self._config.database.max_pool_size

    # Storage
    @property
    def max_upload_size_mb(self) -> int:
        return self._config.storage.max_upload_mb

    @property
    def max_upload_size_bytes(self) -> int:
        return self._config.storage.max_upload_bytes

    # Import pipeline
    @property
    def import_max_rows(self) -> int:
        return self._config.importer.max_rows

    @property
    def submit_delay_seconds(self) -> float:
        return self._config.importer.submit_delay_seconds

    @property
    def preview_rows(self) -> int:
        return self._config.importer.preview_rows

    # Remote member API
    @property
    def graphql_url(self) -> str:
        return self._config.remote.graphql_url

    @property
    def organisation_id(self) -> str | None:
        return self._config.remote.organisation_id

    @property
    def branch_id(self) -> str | None:
        return self._config.remote.branch_id

    @property
    def remote_timeout_seconds(self) -> float:
        return self._config.remote.timeout_seconds

    # Secrets
    @property
    def api_token(self) -> str | None:
        return self._secrets.api_token


# Global settings instance - lazily initialized
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    The settings are loaded once and cached for subsequent calls.

    Returns:
        The global Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance.

    This is primarily useful for testing to reload configuration.
    """
    global _settings
    _settings = None


class _SettingsProxy:
    """Proxy object that lazily loads settings on first access."""

    def __getattr__(self, name: str):
        return getattr(get_settings(), name)

    def __repr__(self) -> str:
        return repr(get_settings())


settings = _SettingsProxy()
