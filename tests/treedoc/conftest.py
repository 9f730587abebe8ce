"""Shared fixtures for treedoc tests: a scripted LLM client and run contexts."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from treedoc.config.settings import RunConfig
from treedoc.doc_generation.context import RunContext
from treedoc.errors import LLMError
from treedoc.llm.cost import ModelSpec
from treedoc.llm.ratelimit import RateLimitedInvoker
from treedoc.llm.registry import ModelRegistry
from treedoc.token_estimator import TokenEstimator


class FakeLLM:
    """Async stand-in for an LLM client.

    Answers every prompt with ``reply`` and records ``(prompt, model)``.
    Prompts containing any string in ``fail_on`` are rejected with LLMError.
    """

    def __init__(
        self,
        reply: str = "A generated summary.",
        fail_on: Tuple[str, ...] = (),
        delay: float = 0.0,
    ):
        self.reply = reply
        self.fail_on = fail_on
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []

    async def __call__(self, prompt: str, model: str) -> str:
        self.calls.append((prompt, model))
        if self.delay:
            await asyncio.sleep(self.delay)
        if any(marker in prompt for marker in self.fail_on):
            raise LLMError(f"{model} rejected the request", status_code=400)
        return self.reply


def small_registry(*ceilings: int) -> ModelRegistry:
    """Registry of models ``m0, m1, ...`` with the given ceilings, in order."""
    return ModelRegistry(
        ModelSpec(f"m{i}", ceiling, 0.001, 0.002) for i, ceiling in enumerate(ceilings)
    )


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def llm_factory():
    """The FakeLLM class, for tests that need a scripted client."""
    return FakeLLM


@pytest.fixture
def registry_factory():
    return small_registry


@pytest.fixture
def estimator() -> TokenEstimator:
    return TokenEstimator("approx")


@pytest.fixture
def source_tree(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., RunConfig]:
    def _make(root: Optional[Path] = None, **kwargs) -> RunConfig:
        kwargs.setdefault("name", "demo")
        kwargs.setdefault("output", tmp_path / "out")
        kwargs.setdefault("ignore", [".*"])
        kwargs.setdefault("llms", ["m0"])
        return RunConfig(root=root or tmp_path / "project", **kwargs)

    return _make


@pytest.fixture
def make_context(make_config, estimator, fake_llm) -> Callable[..., RunContext]:
    def _make(
        root: Optional[Path] = None,
        registry: Optional[ModelRegistry] = None,
        client=None,
        invoker: Optional[RateLimitedInvoker] = None,
        **config_kwargs,
    ) -> RunContext:
        return RunContext(
            config=make_config(root, **config_kwargs),
            registry=registry or small_registry(100_000),
            estimator=estimator,
            invoker=invoker or RateLimitedInvoker(4),
            client=client or fake_llm,
        )

    return _make
