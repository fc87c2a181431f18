"""Project configuration.

Read from `<root>/.doclink/config.yaml` when the file exists; every
field has a default so the file is optional. Example:

    type_aliases:
      Email: string
      Money: number
    similarity_threshold: 0.85
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .code import DEFAULT_ANNOTATION
from .errors import ConfigError
from .heuristic import DEFAULT_THRESHOLD
from .sections import DEFAULT_MARKER
from .types import CanonicalType, build_alias_table

log = logging.getLogger(__name__)

CONFIG_DIR = ".doclink"
CONFIG_FILE = "config.yaml"
LOG_LEVEL_ENV = "DOCLINK_LOG_LEVEL"


class DoclinkConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type_aliases: dict[str, CanonicalType] = {}
    marker: str = Field(default=DEFAULT_MARKER, min_length=1)
    annotation: str = Field(default=DEFAULT_ANNOTATION, min_length=1)
    similarity_threshold: float = Field(default=DEFAULT_THRESHOLD, gt=0.0, le=1.0)
    baseline_path: str = f"{CONFIG_DIR}/baseline.yaml"
    debounce_seconds: float = Field(default=0.15, ge=0.0)
    log_level: str = "WARNING"

    @field_validator("type_aliases", mode="before")
    @classmethod
    def _lowercase_alias_targets(cls, value):
        if isinstance(value, dict):
            return {k: v.lower() if isinstance(v, str) else v for k, v in value.items()}
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    def aliases(self) -> dict[str, CanonicalType]:
        """Built-in type aliases with the configured ones merged over them."""
        return build_alias_table(self.type_aliases)

    def baseline_file(self, root: Path) -> Path:
        path = Path(self.baseline_path)
        return path if path.is_absolute() else Path(root) / path


def config_path(root: Path) -> Path:
    return Path(root) / CONFIG_DIR / CONFIG_FILE


def load_config(root: Path, path: Path | None = None) -> DoclinkConfig:
    """Load configuration for a project.

    Args:
        root: Project root.
        path: Explicit config file. Defaults to `.doclink/config.yaml`
            under root; a missing default file means all defaults.

    Raises:
        ConfigError: If the file cannot be parsed or fails validation.
    """
    explicit = path is not None
    path = Path(path) if explicit else config_path(root)

    raw: dict = {}
    if path.exists():
        try:
            loaded = yaml.safe_load(path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot read config {path}: {e}", str(path)) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"config {path} must be a mapping", str(path))
        raw = loaded or {}
    elif explicit:
        raise ConfigError(f"config file not found: {path}", str(path))

    env_level = os.environ.get(LOG_LEVEL_ENV)
    if env_level:
        raw = {**raw, "log_level": env_level}

    try:
        config = DoclinkConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(
            f"invalid config {path}", str(path), details=e.errors(include_context=False)
        ) from e

    log.debug(f"Loaded config from {path if path.exists() else 'defaults'}")
    return config
