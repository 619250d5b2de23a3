"""Runtime settings for the CLI and catalog checks."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal, Mapping

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import Policies, load_policies
from .sources import deep_merge, env_overrides, read_yaml

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_ENV_PREFIX = "SITERECIPES_SETTINGS__"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class LogConfig(BaseModel):
    """Log verbosity and the optional rotating file sink."""

    level: str = Field(default="INFO")
    directory: Path | None = Field(
        default=PROJECT_ROOT / "logs",
        description="Directory for the file sink; null disables file logging.",
    )
    file_name: str = Field(default="siterecipes.log", min_length=1)
    rotation: str = Field(default="10 MB")
    retention: str = Field(default="14 days")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}; expected one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def file(self) -> Path | None:
        if self.directory is None:
            return None
        directory = self.directory if self.directory.is_absolute() else PROJECT_ROOT / self.directory
        return directory / self.file_name


class Settings(BaseSettings):
    """Layered configuration object.

    Layers, lowest precedence first: class defaults, ``config/default.yaml``,
    ``config/<environment>.yaml``, ``SITERECIPES_SETTINGS__SECTION__KEY``
    variables, then explicit keyword arguments (which include plain
    ``SITERECIPES_<FIELD>`` variables read by :class:`BaseSettings`).
    Policies also honour ``SITERECIPES_POLICY__`` variables through
    :func:`load_policies`.
    """

    model_config = SettingsConfigDict(
        env_prefix="SITERECIPES_",
        validate_assignment=True,
        extra="ignore",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Selects the environment YAML layered over default.yaml",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    log: LogConfig = Field(default_factory=LogConfig)
    policies: Policies = Field(default_factory=Policies)

    @model_validator(mode="before")
    @classmethod
    def _layer_sources(cls, values: Any) -> Any:
        if not isinstance(values, Mapping):
            return values
        explicit = {key: value for key, value in values.items() if value is not None}
        config_dir = Path(explicit.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = explicit.get("environment") or os.getenv("SITERECIPES_ENV", "development")

        merged: Dict[str, Any] = {}
        for layer in (
            read_yaml(config_dir / "default.yaml"),
            read_yaml(config_dir / f"{environment}.yaml"),
            env_overrides(SETTINGS_ENV_PREFIX),
            explicit,
        ):
            merged = deep_merge(merged, layer)

        merged.setdefault("environment", environment)
        policies = merged.get("policies")
        if not isinstance(policies, Policies):
            merged["policies"] = load_policies(policies or {})
        return merged

    @property
    def policy_version(self) -> str:
        return self.policies.policy_version

    @property
    def log_file(self) -> Path | None:
        return self.log.file


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a process-wide settings instance."""

    return Settings()


__all__ = ["LOG_LEVELS", "LogConfig", "Settings", "get_settings"]
