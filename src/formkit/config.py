"""Configuration file loading and validation."""

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import (
    DATABASE_PATH,
    DEFAULT_OPTIONS_LIMIT,
    DEFAULT_RELATIONSHIP_LIMIT,
    LOG_FILE,
    RESOLUTION_MAX_WORKERS,
    TIMEOUT_OPTION_RESOLUTION,
)
from .errors import ConfigException

logger = logging.getLogger(__name__)


class ResolverConfig(BaseModel):
    """Option resolution configuration."""

    options_limit: int = Field(default=DEFAULT_OPTIONS_LIMIT, gt=0)
    relationship_limit: int = Field(default=DEFAULT_RELATIONSHIP_LIMIT, gt=0)
    timeout: float = Field(default=TIMEOUT_OPTION_RESOLUTION, gt=0)
    max_workers: int = Field(default=RESOLUTION_MAX_WORKERS, ge=1)


class WebConfig(BaseModel):
    """Web service configuration."""

    enabled: bool = True
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)


class DatabaseConfig(BaseModel):
    path: str = Field(default=DATABASE_PATH)


class Config(BaseSettings):
    """Application configuration."""

    log_file: str = Field(default=LOG_FILE)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    schemas_dir: Optional[str] = None
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    model_config = SettingsConfigDict(
        env_prefix="FORMKIT_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from specified path."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigException(f"Configuration file not found: {config_path}")

        class _Config(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix="FORMKIT_",
                env_nested_delimiter="__",
            )

        try:
            return _Config()
        except ValidationError as e:
            raise ConfigException(format_validation_error(e)) from e


def format_validation_error(e: Exception) -> str:
    if not isinstance(e, ValidationError):
        return str(e)

    lines = ["Configuration validation failed:"]
    for error in e.errors():
        loc = " -> ".join(str(item) for item in error.get("loc", []))
        msg = error.get("msg", "")
        lines.append(f"  - {loc}: {msg}" if loc else f"  - {msg}")
    return "\n".join(lines)
