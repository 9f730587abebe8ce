"""Budget-aware model selection.

Provides:
- select_model(): First model in priority order whose ceiling exceeds the need
- select_folder_model(): The model folder roll-ups always use
"""

from __future__ import annotations

from typing import Optional

from treedoc.llm.registry import ModelRecord, ModelRegistry


def select_model(registry: ModelRegistry, need: int) -> Optional[ModelRecord]:
    """Select the preferred model that can take a prompt of ``need`` tokens.

    Walks the registry from the cheapest/preferred model to the largest
    fallback and returns the first whose ceiling strictly exceeds ``need``.
    Returns None when nothing fits; callers treat that as a skip, not an
    error.
    """
    for record in registry:
        if record.fits(need):
            return record
    return None


def select_folder_model(registry: ModelRegistry) -> ModelRecord:
    """Folder aggregation always runs on the most capable model."""
    return registry.largest()
