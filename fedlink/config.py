import logging
import os
import sys
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

from fedlink.util.paths import FedlinkPaths


class Backend(StrEnum):
    """Storage engine that executes federation link statements."""

    EMBEDDED = "embedded"  # SQLite via aiosqlite
    POSTGRES = "postgres"  # PostgreSQL via asyncpg


# URL prefixes accepted for each backend
BACKEND_URL_PREFIXES: dict[Backend, str] = {
    Backend.EMBEDDED: "sqlite",
    Backend.POSTGRES: "postgresql",
}


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from the YAML file named by FEDLINK_CONFIG_FILE."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("FEDLINK_CONFIG_FILE")
        path = Path(config_file) if config_file else FedlinkPaths().config_file
        if path.exists():
            return yaml.safe_load(path.read_text()) or {}
        return {}


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter).

    `backend` picks the storage engine once at startup. An empty `url` means
    "derive from FedlinkPaths" and is only valid for the embedded backend.
    """

    backend: Backend = Backend.EMBEDDED
    url: str = ""
    echo: bool = False
    auto_migrate: bool = True
    pool_size: int = 5  # PostgreSQL only
    max_overflow: int = 10  # PostgreSQL only
    query_size_hint: int = 10  # Rows fetched per batch, never a result limit

    @field_validator("url", mode="after")
    @classmethod
    def use_async_driver(cls, v: str) -> str:
        """Add the async driver to plain URLs (postgres://, postgresql://, sqlite://)."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @model_validator(mode="after")
    def check_url_matches_backend(self) -> Self:
        if not self.url:
            if self.backend is Backend.POSTGRES:
                raise ValueError("database.url is required for the postgres backend")
            return self
        prefix = BACKEND_URL_PREFIXES[self.backend]
        if not self.url.startswith(prefix):
            raise ValueError(
                f"database.url {self.url.split(':', 1)[0]!r} does not match backend {self.backend}"
            )
        if self.backend is Backend.EMBEDDED and "///" not in self.url:
            raise ValueError(
                "database.url for the embedded backend needs a path: sqlite+aiosqlite:///<file>"
            )
        return self


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from FEDLINK_LOG_FILE env var."""
        return os.environ.get("FEDLINK_LOG_FILE")


class Config(BaseSettings):
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "FEDLINK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows FEDLINK_DATABASE__URL override
    }

    @model_validator(mode="after")
    def derive_database_url(self) -> Self:
        """Point the embedded backend at the data directory when no URL is set."""
        if not self.database.url:
            paths = FedlinkPaths()
            self.database = self.database.model_copy(
                update={"url": f"sqlite+aiosqlite:///{paths.database_file}"}
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env > .env > yaml > secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called once at startup, before the storage engine is created.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
