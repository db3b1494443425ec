"""Centralized configuration loaded from environment variables.

All settings are read from environment variables with sensible defaults.
The Anthropic key also checks Streamlit secrets (st.secrets) so the app
works on Streamlit Cloud without hardcoded credentials.
"""

import logging
import os
from pathlib import Path


def get_anthropic_api_key() -> str:
    """Get the Anthropic API key lazily so st.secrets is ready.

    Must be called at runtime (not import time) because Streamlit
    Cloud only makes st.secrets available after the app starts.
    """
    try:
        import streamlit as st
        if hasattr(st, "secrets") and "ANTHROPIC_API_KEY" in st.secrets:
            return str(st.secrets["ANTHROPIC_API_KEY"])
    except Exception:
        # No secrets.toml outside Streamlit; fall back to the environment.
        pass
    return os.environ.get("ANTHROPIC_API_KEY", "")


def _get_int(key: str, default: int) -> int:
    """Read an integer environment variable with a default."""
    return int(os.environ.get(key, str(default)))


def _get_float(key: str, default: float) -> float:
    """Read a float environment variable with a default."""
    return float(os.environ.get(key, str(default)))


# Anthropic API: model and limits from env vars, key is lazy via function
ANTHROPIC_MODEL: str = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-20250514")
PREDICTION_MAX_TOKENS: int = _get_int("PREDICTION_MAX_TOKENS", 2048)
WEB_SEARCH_MAX_USES: int = _get_int("WEB_SEARCH_MAX_USES", 5)
AI_REQUEST_TIMEOUT: float = _get_float("AI_REQUEST_TIMEOUT", 120.0)

# Local persistence
HISTORY_LIMIT: int = _get_int("HISTORY_LIMIT", 50)
STORAGE_PATH: Path = Path(
    os.environ.get(
        "COMFORT_STORAGE_PATH",
        str(Path.home() / ".comfort_predictor" / "local_storage.json"),
    )
).expanduser()

# Logging
LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Install a root log handler once, at LOG_LEVEL.

    Streamlit reruns the app script on every interaction, so this
    must be safe to call repeatedly.
    """
    root = logging.getLogger()
    if any(getattr(h, "_comfort_predictor", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._comfort_predictor = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(LOG_LEVEL)
