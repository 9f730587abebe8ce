"""Exception types shared across treedoc."""

from __future__ import annotations

from typing import Optional


class TreedocError(Exception):
    """Base class for treedoc errors."""


class ConfigError(TreedocError):
    """Raised when the run configuration cannot be loaded or is invalid."""


class ModelNotFoundError(TreedocError, KeyError):
    """Raised when a configured model id is not in the model table."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unknown model: {model_id}")
        self.model_id = model_id

    def __str__(self) -> str:
        return self.args[0]


class LLMError(TreedocError):
    """Raised when an LLM call fails or the provider rejects it."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
