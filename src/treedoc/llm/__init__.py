"""LLM infrastructure: model registry, selection, pricing and the call gate."""

from __future__ import annotations

from typing import Awaitable, Protocol

from .cost import MODEL_SPECS, ModelSpec, calculate_cost, get_model_spec
from .ratelimit import RateLimitedInvoker
from .registry import ModelRecord, ModelRegistry
from .select import select_folder_model, select_model


class LLMClient(Protocol):
    """Anything that turns a prompt into completion text for a model id."""

    def __call__(self, prompt: str, model: str) -> Awaitable[str]:
        ...


__all__ = [
    "LLMClient",
    "MODEL_SPECS",
    "ModelRecord",
    "ModelRegistry",
    "ModelSpec",
    "RateLimitedInvoker",
    "calculate_cost",
    "get_model_spec",
    "select_folder_model",
    "select_model",
]
