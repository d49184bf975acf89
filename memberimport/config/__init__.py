"""Member Import configuration module.

This module provides TOML-based configuration with environment variable overrides.

Configuration is loaded from the following locations (in order of priority):
1. Environment variables (highest priority)
2. ./config.toml (project root - for development)
3. ~/.config/memberimport/config.toml (user config)
4. /opt/memberimport/config.toml (production install)
5. /etc/memberimport/config.toml (system config)

Secrets are loaded from secrets.env files in the same directories.
"""

from memberimport.config.schema import (
    DatabaseConfig,
    ImportConfig,
    MemberImportConfig,
    RemoteConfig,
    SecretsConfig,
    ServerConfig,
    StorageConfig,
)
from memberimport.config.settings import get_settings, settings

__all__ = [
    "DatabaseConfig",
    "ImportConfig",
    "MemberImportConfig",
    "RemoteConfig",
    "SecretsConfig",
    "ServerConfig",
    "StorageConfig",
    "get_settings",
    "settings",
]
