"""Configuration loader for Member Import.

Loads configuration from TOML files and secrets from .env files.
Environment variables can override any configuration value.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from memberimport.config.schema import MemberImportConfig, SecretsConfig

logger = logging.getLogger(__name__)

APP_DIR_NAME = "memberimport"

# Keys whose env override values need converting before validation
_INT_KEYS = {"port", "max_upload_mb", "max_rows", "submit_delay_ms", "preview_rows"}
_FLOAT_KEYS = {"timeout_seconds"}
_BOOL_KEYS = {"debug"}


def get_config_search_paths() -> list[Path]:
    """Get the list of paths to search for configuration files.

    Returns paths in priority order (first found wins):
    1. ./config.toml (project root - for development)
    2. ~/.config/memberimport/config.toml (user config)
    3. /opt/memberimport/config.toml (production install)
    4. /etc/memberimport/config.toml (system config)
    """
    return [
        Path.cwd() / "config.toml",
        Path.home() / ".config" / APP_DIR_NAME / "config.toml",
        Path(f"/opt/{APP_DIR_NAME}/config.toml"),
        Path(f"/etc/{APP_DIR_NAME}/config.toml"),
    ]


def get_secrets_search_paths() -> list[Path]:
    """Get the list of paths to search for secrets files.

    Same directories as config.toml, looking for secrets.env.
    """
    return [
        Path.cwd() / "secrets.env",
        Path.home() / ".config" / APP_DIR_NAME / "secrets.env",
        Path(f"/opt/{APP_DIR_NAME}/secrets.env"),
        Path(f"/etc/{APP_DIR_NAME}/secrets.env"),
    ]


def find_config_file() -> Path | None:
    """Find the first existing config file from search paths."""
    for path in get_config_search_paths():
        if path.exists() and path.is_file():
            logger.debug(f"Found config file: {path}")
            return path
    return None


def find_secrets_file() -> Path | None:
    """Find the first existing secrets file from search paths."""
    for path in get_secrets_search_paths():
        if path.exists() and path.is_file():
            logger.debug(f"Found secrets file: {path}")
            return path
    return None


def load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a simple .env file into a dictionary.

    Supports:
    - KEY=value
    - KEY="quoted value"
    - # comments
    - Empty lines
    """
    env_vars: dict[str, str] = {}

    with open(path) as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if (value.startswith('"') and value.endswith('"')) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]

            env_vars[key] = value

    return env_vars


def apply_env_overrides(config_dict: dict[str, Any], prefix: str = "MEMBERIMPORT") -> None:
    """Apply environment variable overrides to configuration dictionary.

    Environment variables are mapped as follows:
    - MEMBERIMPORT_SERVER_HOST -> config_dict["server"]["host"]
    - MEMBERIMPORT_REMOTE_GRAPHQL_URL -> config_dict["remote"]["graphql_url"]
    - etc.

    Note: This modifies config_dict in place.
    """
    env_mappings = {
        # Server
        f"{prefix}_SERVER_HOST": ("server", "host"),
        f"{prefix}_SERVER_PORT": ("server", "port"),
        f"{prefix}_SERVER_DEBUG": ("server", "debug"),
        f"{prefix}_DEBUG": ("server", "debug"),  # Shorthand
        f"{prefix}_HOST": ("server", "host"),  # Shorthand
        f"{prefix}_PORT": ("server", "port"),  # Shorthand
        # Database
        f"{prefix}_DATABASE_MONGODB_URL": ("database", "mongodb_url"),
        f"{prefix}_DATABASE_MONGODB_DATABASE": ("database", "mongodb_database"),
        f"{prefix}_MONGODB_URL": ("database", "mongodb_url"),  # Shorthand
        f"{prefix}_MONGODB_DATABASE": ("database", "mongodb_database"),  # Shorthand
        # Storage
        f"{prefix}_STORAGE_MAX_UPLOAD_MB": ("storage", "max_upload_mb"),
        # Import pipeline
        f"{prefix}_IMPORT_MAX_ROWS": ("importer", "max_rows"),
        f"{prefix}_IMPORT_SUBMIT_DELAY_MS": ("importer", "submit_delay_ms"),
        f"{prefix}_IMPORT_PREVIEW_ROWS": ("importer", "preview_rows"),
        # Remote member API
        f"{prefix}_REMOTE_GRAPHQL_URL": ("remote", "graphql_url"),
        f"{prefix}_REMOTE_ORGANISATION_ID": ("remote", "organisation_id"),
        f"{prefix}_REMOTE_BRANCH_ID": ("remote", "branch_id"),
        f"{prefix}_REMOTE_TIMEOUT_SECONDS": ("remote", "timeout_seconds"),
        f"{prefix}_ORGANISATION_ID": ("remote", "organisation_id"),  # Shorthand
        f"{prefix}_BRANCH_ID": ("remote", "branch_id"),  # Shorthand
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            section, key = path

            if section not in config_dict:
                config_dict[section] = {}

            if key in _INT_KEYS:
                config_dict[section][key] = int(value)
            elif key in _FLOAT_KEYS:
                config_dict[section][key] = float(value)
            elif key in _BOOL_KEYS:
                config_dict[section][key] = value.lower() in ("true", "1", "yes")
            else:
                config_dict[section][key] = value


def load_secrets(secrets_file: Path | None = None) -> SecretsConfig:
    """Load secrets from environment variables and optional secrets.env file.

    Environment variables take precedence over file values.
    """
    secrets_dict: dict[str, str | None] = {}
    key_mapping = {
        "MEMBERIMPORT_API_TOKEN": "api_token",
    }

    if secrets_file is None:
        secrets_file = find_secrets_file()

    if secrets_file and secrets_file.exists():
        logger.info(f"Loading secrets from: {secrets_file}")
        file_secrets = parse_env_file(secrets_file)

        for file_key, config_key in key_mapping.items():
            if file_key in file_secrets:
                secrets_dict[config_key] = file_secrets[file_key]

    for env_var, config_key in key_mapping.items():
        value = os.environ.get(env_var)
        if value:
            secrets_dict[config_key] = value

    return SecretsConfig(**secrets_dict)


def load_config(config_file: Path | None = None) -> MemberImportConfig:
    """Load configuration from TOML file with environment variable overrides.

    Args:
        config_file: Optional path to config file. If not provided,
                     searches default locations.

    Returns:
        MemberImportConfig instance with all settings loaded.
    """
    config_dict: dict[str, Any] = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file and config_file.exists():
        logger.info(f"Loading config from: {config_file}")
        config_dict = load_toml_file(config_file)
    else:
        logger.info("No config file found, using defaults with env overrides")

    apply_env_overrides(config_dict)

    return MemberImportConfig(**config_dict)
