"""Run context shared by every file and folder task of one run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from treedoc.config.settings import RunConfig
from treedoc.llm import LLMClient
from treedoc.llm.ratelimit import RateLimitedInvoker
from treedoc.llm.registry import ModelRegistry
from treedoc.token_estimator import TokenEstimator

from .traversal import IgnorePolicy


@dataclass
class RunContext:
    """Process-wide state of one run, passed by reference to every task.

    ``registry`` is the only part mutated concurrently; see
    ``treedoc.llm.registry`` for the update discipline.
    """

    config: RunConfig
    registry: ModelRegistry
    estimator: TokenEstimator
    invoker: RateLimitedInvoker
    client: LLMClient

    @property
    def input_root(self) -> Path:
        return self.config.root

    @property
    def output_root(self) -> Path:
        return self.config.output

    @property
    def project_name(self) -> str:
        return self.config.name

    def input_ignore(self) -> IgnorePolicy:
        return IgnorePolicy(self.config.ignore, self.input_root)

    def output_ignore(self) -> IgnorePolicy:
        return IgnorePolicy(self.config.ignore, self.output_root)

    async def call(self, prompt: str, model_id: str) -> str:
        """Send one prompt through the run's rate-limited invoker."""
        return await self.invoker.schedule(lambda: self.client(prompt, model_id))
