"""Model registry - run-scoped usage accounting per model.

Provides:
- ModelRecord: a ModelSpec plus cumulative usage counters
- ModelRegistry: ordered collection of records (priority order)

Counters only move forward, and only through ``record_success`` and
``record_failure``. Each update completes without awaiting, so concurrent
asyncio tasks never interleave inside one. A threaded caller would need to
wrap both methods in a lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional

from treedoc.errors import ConfigError, ModelNotFoundError
from treedoc.llm.cost import MODEL_SPECS, ModelSpec, calculate_cost


@dataclass
class ModelRecord:
    """Usage counters for one model over one run."""

    spec: ModelSpec
    input_tokens: int = 0
    output_tokens: int = 0
    succeeded: int = 0
    failed: int = 0
    total: int = 0

    @property
    def id(self) -> str:
        return self.spec.id

    @property
    def max_length(self) -> int:
        return self.spec.max_length

    @property
    def cost(self) -> float:
        return calculate_cost(self.spec, self.input_tokens, self.output_tokens)

    def fits(self, need: int) -> bool:
        """True when a prompt of ``need`` tokens fits strictly under the ceiling."""
        return self.spec.max_length > need

    def record_success(self, input_tokens: int, output_tokens: int) -> None:
        if input_tokens < 0 or output_tokens < 0:
            raise ValueError("token counts must be non-negative")
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.total += 1
        self.succeeded += 1

    def record_failure(self) -> None:
        self.failed += 1


class ModelRegistry:
    """Models available to a run, in priority order (preferred first)."""

    def __init__(self, specs: Iterable[ModelSpec]):
        self._records: dict[str, ModelRecord] = {}
        for spec in specs:
            if spec.id in self._records:
                raise ConfigError(f"Duplicate model in registry: {spec.id}")
            self._records[spec.id] = ModelRecord(spec)
        if not self._records:
            raise ConfigError("ModelRegistry needs at least one model")

    @classmethod
    def from_ids(
        cls,
        model_ids: Iterable[str],
        specs: Optional[Mapping[str, ModelSpec]] = None,
    ) -> "ModelRegistry":
        """Build a registry from model ids, looked up in ``specs`` (MODEL_SPECS by default)."""
        table = MODEL_SPECS if specs is None else specs
        resolved = []
        for model_id in model_ids:
            spec = table.get(model_id)
            if spec is None:
                raise ModelNotFoundError(model_id)
            resolved.append(spec)
        return cls(resolved)

    def get(self, model_id: str) -> ModelRecord:
        try:
            return self._records[model_id]
        except KeyError:
            raise ModelNotFoundError(model_id) from None

    def largest(self) -> ModelRecord:
        """The record with the greatest ceiling (first one on ties)."""
        return max(self._records.values(), key=lambda r: r.max_length)

    def __iter__(self) -> Iterator[ModelRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._records

    def __repr__(self) -> str:
        return f"ModelRegistry({list(self._records)})"
