"""Configuration for railreport.

Two sources:
- ``Settings``: credentials and tunables from environment variables (and an
  optional ``.env`` file);
- the mapping file (``.testrail-cli.yml`` by default, YAML or JSON) holding
  the project defaults and the case mapping tables.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from railreport.core.exceptions import ConfigError
from railreport.resolution.mapping import CaseMapping

DEFAULT_CONFIG_FILE = ".testrail-cli.yml"


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RAILREPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # TestRail credentials
    url: str | None = Field(
        default=None, validation_alias=AliasChoices("TESTRAIL_URL", "RAILREPORT_URL")
    )
    username: str | None = Field(
        default=None, validation_alias=AliasChoices("TESTRAIL_UN", "RAILREPORT_USERNAME")
    )
    password: str | None = Field(
        default=None, validation_alias=AliasChoices("TESTRAIL_PW", "RAILREPORT_PASSWORD")
    )
    timeout: float = 30.0

    # Retry
    max_attempts: int = Field(default=5, ge=1)
    retry_delay: float = Field(default=0.0, ge=0.0)

    # Report loading
    max_workers: int = Field(default=4, ge=1)

    # Logging
    debug: bool = False
    log_level: str = "INFO"
    log_json_format: bool = False

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@dataclass(frozen=True)
class ReporterConfig:
    """Contents of the mapping file."""

    project_id: int | str | None = None
    suite_id: int | str | None = None
    coverage: bool = False
    mapping: CaseMapping = field(default_factory=CaseMapping)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ReporterConfig:
        data = data or {}
        try:
            mapping = CaseMapping.from_dict(data)
        except (ValueError, TypeError, AttributeError, re.error) as e:
            raise ConfigError(f"Invalid case mapping: {e}") from e
        return cls(
            project_id=data.get("projectId"),
            suite_id=data.get("suiteId"),
            coverage=bool(data.get("coverage", False)),
            mapping=mapping,
        )


def _read_mapping_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix in (".yml", ".yaml"):
        return yaml.safe_load(text)
    if suffix == ".json":
        return json.loads(text)
    raise ConfigError(f"Map parsing for {suffix or path.name} is not implemented")


def load_config(path: Path | str | None = None) -> ReporterConfig:
    """Load the mapping file.

    Args:
        path: Explicit config file. When omitted, ``.testrail-cli.yml`` in the
            working directory is used if it exists.

    Returns:
        ReporterConfig; empty when no default file exists.

    Raises:
        ConfigError: If an explicit file is missing, has an unsupported
            extension, or cannot be parsed.
    """
    explicit = path is not None
    config_path = Path(path) if explicit else Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return ReporterConfig()

    try:
        data = _read_mapping_file(config_path)
    except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {config_path}")
    return ReporterConfig.from_dict(data)
