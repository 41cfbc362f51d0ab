"""Runtime configuration, read once from the environment."""

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

# Oracle
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").strip().lower()
LLM_TIMEOUT_S = _env_float("LLM_TIMEOUT_S", 20.0)

# Store / presentation defaults
SEED_DEFAULT_CATEGORIES = _env_bool("SEED_DEFAULT_CATEGORIES", True)
CONTEXT_LIST_LIMIT = _env_int("CONTEXT_LIST_LIMIT", 20)
NOTIFICATION_LIMIT = _env_int("NOTIFICATION_LIMIT", 10)

DEFAULT_CATEGORY = "General"
DEFAULT_CATEGORY_COLOR = "#6B7280"
DEFAULT_PRIORITY_SCORE = 3
SUGGESTION_CONTEXT_SIZE = 5
