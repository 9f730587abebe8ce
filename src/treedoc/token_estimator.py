"""Token estimation for prompts.

Model selection compares these counts against each model's context
ceiling, so an estimator must be deterministic: the same text always
yields the same count for the same encoding.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import tiktoken

from treedoc.config.defaults import (
    TOKEN_ESTIMATOR_APPROX,
    TOKEN_ESTIMATOR_ENCODING_DEFAULT,
    TOKENS_PER_CHAR_ENGLISH,
)

logger = logging.getLogger(__name__)


def estimate_tokens(text: str) -> int:
    """
    Estimate token count for text.

    Uses a character-based approximation. Use ``TokenEstimator`` with a
    tiktoken encoding for exact counts.

    Args:
        text: Input text

    Returns:
        Estimated token count
    """
    if not text:
        return 0

    return max(1, len(text) // TOKENS_PER_CHAR_ENGLISH)


class TokenEstimator:
    """Counts prompt tokens with one fixed encoding.

    ``encoding`` is a tiktoken encoding name (``cl100k_base``) or a model
    name tiktoken knows (``gpt-4``). ``"approx"`` selects the character
    ratio scheme, which needs no encoder download.
    """

    def __init__(self, encoding: str = TOKEN_ESTIMATOR_ENCODING_DEFAULT):
        self.encoding = encoding
        self._encoder: Optional[tiktoken.Encoding] = None

    @property
    def is_approximate(self) -> bool:
        return self.encoding == TOKEN_ESTIMATOR_APPROX

    def _load_encoder(self) -> tiktoken.Encoding:
        if self._encoder is None:
            try:
                self._encoder = tiktoken.get_encoding(self.encoding)
            except ValueError:
                # Not an encoding name; treat it as a model name
                self._encoder = tiktoken.encoding_for_model(self.encoding)
            logger.debug("Loaded tiktoken encoding %s", self._encoder.name)
        return self._encoder

    def estimate(self, text: str) -> int:
        """Return the token count of ``text``."""
        if self.is_approximate:
            return estimate_tokens(text)
        if not text:
            return 0
        # Prompts may quote source files containing special-token text
        return len(self._load_encoder().encode(text, disallowed_special=()))

    def __repr__(self) -> str:
        return f"TokenEstimator(encoding={self.encoding!r})"


# Estimator instances keyed by encoding
_estimators: dict[str, TokenEstimator] = {}


def get_token_estimator(encoding: Optional[str] = None) -> TokenEstimator:
    """Get a shared estimator for ``encoding`` (env ``TREEDOC_TOKENIZER`` by default)."""
    if encoding is None:
        encoding = os.environ.get("TREEDOC_TOKENIZER", TOKEN_ESTIMATOR_ENCODING_DEFAULT)
    estimator = _estimators.get(encoding)
    if estimator is None:
        estimator = TokenEstimator(encoding)
        _estimators[encoding] = estimator
    return estimator
