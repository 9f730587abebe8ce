"""Model table and cost calculator.

Provides:
- ModelSpec: immutable description of one model (ceiling, pricing)
- MODEL_SPECS: all known models, keyed by id
- calculate_cost(): Compute cost from token counts
- get_model_spec(): Look up a model by id
"""

from __future__ import annotations

from dataclasses import dataclass

from treedoc.config.defaults import DEFAULT_MODEL_TABLE
from treedoc.errors import ModelNotFoundError


@dataclass(frozen=True)
class ModelSpec:
    """One LLM configuration available to the pipeline."""

    id: str
    max_length: int
    cost_per_1k_input: float = 0.0
    cost_per_1k_output: float = 0.0

    def __post_init__(self) -> None:
        if self.max_length <= 0:
            raise ValueError(f"max_length must be positive for {self.id}")


MODEL_SPECS: dict[str, ModelSpec] = {
    model_id: ModelSpec(model_id, max_length, cost_in, cost_out)
    for model_id, (max_length, cost_in, cost_out) in DEFAULT_MODEL_TABLE.items()
}


def get_model_spec(model_id: str) -> ModelSpec:
    """Look up a model in MODEL_SPECS."""
    spec = MODEL_SPECS.get(model_id)
    if spec is None:
        raise ModelNotFoundError(model_id)
    return spec


def calculate_cost(spec: ModelSpec, input_tokens: int, output_tokens: int) -> float:
    """Compute the dollar cost of a token volume on ``spec``."""
    return (input_tokens / 1000) * spec.cost_per_1k_input + \
           (output_tokens / 1000) * spec.cost_per_1k_output
