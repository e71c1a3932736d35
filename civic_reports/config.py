"""Configuration loading from YAML and environment.

Each section reads its own env prefix (STORAGE_, SERVER_, LOGGING_), and
${VAR} references inside config.yaml are replaced from the environment.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from civic_reports.storage import DEFAULT_QUOTA_BYTES

# Injected by load_config so substitution can read env
_current_env: dict[str, str] = {}


class StorageConfig(BaseSettings):
    """Where and how the issue collection is persisted."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", extra="ignore")

    backend: str = Field(default="file", description="file or memory")
    path: Path = Field(default=Path(".civic/local_storage.json"), description="Storage file for the file backend")
    key: str = Field(default="civicIssues", description="Slot key holding the serialized issues")
    quota_bytes: int = Field(default=DEFAULT_QUOTA_BYTES, ge=1, description="Total size limit of stored data")
    seed_sample_data: bool = Field(default=True, description="Seed example issues when the collection is empty")


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="SERVER_", extra="ignore")

    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing file gives defaults (still subject to env overrides).
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        storage=StorageConfig(**(raw.get("storage") or {})),
        server=ServerConfig(**(raw.get("server") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
