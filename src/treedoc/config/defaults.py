"""Default configuration values for treedoc.

This module centralizes the hard-coded numbers (ceilings, token estimates,
timeouts, file names) into a single location. Other modules import these
constants instead of hard-coding values.

Usage:
    from treedoc.config.defaults import (
        INVOKER_MAX_CONCURRENT_CALLS,
        FOLDER_SUMMARY_FILENAME,
    )
"""

from __future__ import annotations

# =============================================================================
# Rate-Limited Invoker Defaults
# =============================================================================

# Maximum number of LLM calls in flight at once across the whole run
INVOKER_MAX_CONCURRENT_CALLS = 25


# =============================================================================
# Usage Accounting Defaults
# =============================================================================

# Output tokens are not measured; each completed file is booked at this
# nominal figure for the end-of-run report.
NOMINAL_OUTPUT_TOKENS_PER_FILE = 1000


# =============================================================================
# Model Table
# =============================================================================

# id -> (context ceiling, $ per 1K input tokens, $ per 1K output tokens)
DEFAULT_MODEL_TABLE = {
    "gpt-3.5-turbo": (3050, 0.0015, 0.002),
    "gpt-4": (8190, 0.03, 0.06),
    "gpt-4-32k": (32750, 0.06, 0.12),
}

# Priority order used when the configuration does not name any models
DEFAULT_MODEL_IDS = ["gpt-4", "gpt-4-32k"]


# =============================================================================
# File Names
# =============================================================================

FOLDER_SUMMARY_FILENAME = "summary.json"
CONFIG_FILENAME = "treedoc.yaml"
ARTIFACT_SUFFIX = ".json"

DEFAULT_OUTPUT_DIR = ".treedoc/docs/json"


# =============================================================================
# Traversal Defaults
# =============================================================================

DEFAULT_IGNORE_PATTERNS = [
    ".*",
    "*package-lock.json",
    "*package.json",
    "node_modules",
    "*dist*",
    "*build*",
    "*test*",
    "*.svg",
    "*.md",
    "*.mdx",
    "*.toml",
    "*treedoc*",
]

# Bytes read from the head of a file when probing for binary content
BINARY_PROBE_BYTES = 8192


# =============================================================================
# Prompt Defaults
# =============================================================================

DEFAULT_TARGET_AUDIENCE = "smart developer"
DEFAULT_CONTENT_TYPE = "code"


# =============================================================================
# Timeout Defaults
# =============================================================================

TIMEOUT_CONNECT_DEFAULT = 10.0
TIMEOUT_READ_DEFAULT = 120.0


# =============================================================================
# Token Estimation Defaults
# =============================================================================

# Character-to-token ratio (tokens ≈ chars / ratio)
TOKENS_PER_CHAR_ENGLISH = 4

# tiktoken encoding used for every prompt; "approx" selects the character ratio
TOKEN_ESTIMATOR_ENCODING_DEFAULT = "cl100k_base"
TOKEN_ESTIMATOR_APPROX = "approx"


# =============================================================================
# Transport Defaults
# =============================================================================

OPENAI_API_BASE_DEFAULT = "https://api.openai.com/v1"
LLM_TEMPERATURE_DEFAULT = 0.1
