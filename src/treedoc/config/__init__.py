"""Configuration for treedoc runs."""

from .settings import RunConfig, load_run_config, save_run_config

__all__ = [
    "RunConfig",
    "load_run_config",
    "save_run_config",
]
