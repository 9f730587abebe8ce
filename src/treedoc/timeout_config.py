"""Timeout configuration for LLM calls.

Provides configurable connect/read timeouts for the HTTP transport.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx

from treedoc.config.defaults import TIMEOUT_CONNECT_DEFAULT, TIMEOUT_READ_DEFAULT


@dataclass
class TimeoutConfig:
    """Configuration for LLM request timeouts."""

    # Timeouts in seconds
    connect_timeout: float = TIMEOUT_CONNECT_DEFAULT
    read_timeout: float = TIMEOUT_READ_DEFAULT

    @classmethod
    def from_env(cls) -> "TimeoutConfig":
        """Create config from environment variables."""
        return cls(
            connect_timeout=float(
                os.environ.get("TREEDOC_CONNECT_TIMEOUT", str(TIMEOUT_CONNECT_DEFAULT))
            ),
            read_timeout=float(
                os.environ.get("TREEDOC_READ_TIMEOUT", str(TIMEOUT_READ_DEFAULT))
            ),
        )

    def as_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(self.connect_timeout, read=self.read_timeout)


# Global config instance
_config: Optional[TimeoutConfig] = None


def get_timeout_config() -> TimeoutConfig:
    """Get global timeout config."""
    global _config
    if _config is None:
        _config = TimeoutConfig.from_env()
    return _config


def set_timeout_config(config: Optional[TimeoutConfig]) -> None:
    """Set global timeout config (``None`` re-reads the environment next time)."""
    global _config
    _config = config
