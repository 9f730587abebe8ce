"""Run configuration - everything a documentation run reads at start.

Resolution order (later wins):
    1. dataclass defaults (see ``treedoc.config.defaults``)
    2. ``treedoc.yaml`` in the working directory, or an explicit file
    3. ``TREEDOC_*`` environment variables
    4. keyword overrides (CLI flags)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from treedoc.config.defaults import (
    CONFIG_FILENAME,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MODEL_IDS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TARGET_AUDIENCE,
    INVOKER_MAX_CONCURRENT_CALLS,
    NOMINAL_OUTPUT_TOKENS_PER_FILE,
    TOKEN_ESTIMATOR_ENCODING_DEFAULT,
)
from treedoc.errors import ConfigError

logger = logging.getLogger(__name__)

_LIST_SEPARATOR = ","


@dataclass
class RunConfig:
    """Configuration for one documentation run."""

    name: str = ""
    repository_url: str = ""
    root: Path = Path(".")
    output: Path = Path(DEFAULT_OUTPUT_DIR)
    llms: list[str] = field(default_factory=lambda: list(DEFAULT_MODEL_IDS))
    ignore: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    max_concurrent_calls: int = INVOKER_MAX_CONCURRENT_CALLS
    output_tokens_per_file: int = NOMINAL_OUTPUT_TOKENS_PER_FILE
    tokenizer: str = TOKEN_ESTIMATOR_ENCODING_DEFAULT
    target_audience: str = DEFAULT_TARGET_AUDIENCE
    content_type: str = DEFAULT_CONTENT_TYPE

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.output = Path(self.output)
        if not self.name:
            self.name = self.root.resolve().name
        if self.max_concurrent_calls < 1:
            raise ConfigError(
                f"max_concurrent_calls must be >= 1, got {self.max_concurrent_calls}"
            )
        if not self.llms:
            raise ConfigError("at least one model must be configured")

    @classmethod
    def from_dict(cls, data: dict) -> "RunConfig":
        """Create config from dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in data if k not in known)
        if unknown:
            logger.debug("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls) -> "RunConfig":
        """Create config from ``TREEDOC_*`` environment variables."""
        return cls.from_dict(_env_values())

    def to_dict(self) -> dict:
        """Convert config to a YAML-friendly dict."""
        return {
            "name": self.name,
            "repository_url": self.repository_url,
            "root": str(self.root),
            "output": str(self.output),
            "llms": list(self.llms),
            "ignore": list(self.ignore),
            "max_concurrent_calls": self.max_concurrent_calls,
            "output_tokens_per_file": self.output_tokens_per_file,
            "tokenizer": self.tokenizer,
            "target_audience": self.target_audience,
            "content_type": self.content_type,
        }


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(_LIST_SEPARATOR) if item.strip()]


def _env_values() -> dict[str, Any]:
    """Collect config values present in the environment."""
    env = os.environ
    values: dict[str, Any] = {}
    plain = {
        "TREEDOC_NAME": "name",
        "TREEDOC_REPOSITORY_URL": "repository_url",
        "TREEDOC_ROOT": "root",
        "TREEDOC_OUTPUT": "output",
        "TREEDOC_TOKENIZER": "tokenizer",
        "TREEDOC_TARGET_AUDIENCE": "target_audience",
        "TREEDOC_CONTENT_TYPE": "content_type",
    }
    for env_name, key in plain.items():
        if env.get(env_name):
            values[key] = env[env_name]

    for env_name, key in (("TREEDOC_LLMS", "llms"), ("TREEDOC_IGNORE", "ignore")):
        if env.get(env_name):
            values[key] = _split_list(env[env_name])

    for env_name, key in (
        ("TREEDOC_MAX_CONCURRENT_CALLS", "max_concurrent_calls"),
        ("TREEDOC_OUTPUT_TOKENS_PER_FILE", "output_tokens_per_file"),
    ):
        if env.get(env_name):
            try:
                values[key] = int(env[env_name])
            except ValueError as e:
                raise ConfigError(f"{env_name} must be an integer: {env[env_name]!r}") from e
    return values


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_run_config(path: Optional[Path] = None, **overrides: Any) -> RunConfig:
    """Resolve the run configuration from file, environment and overrides.

    A missing default config file is not an error. An explicitly named file
    that does not exist is.
    """
    data: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        data.update(_read_config_file(path))
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        if default_path.exists():
            data.update(_read_config_file(default_path))

    data.update(_env_values())
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return RunConfig.from_dict(data)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def save_run_config(config: RunConfig, path: Optional[Path] = None) -> Path:
    """Write config to a YAML file (``treedoc.yaml`` in the cwd by default)."""
    path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return path
