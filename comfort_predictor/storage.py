"""Local key-value persistence for theme, history and the last location.

A tiny stand-in for browser local storage: string values under string
keys, kept in a single JSON object on disk. Persistence is an
optimization, so nothing here ever raises to the caller. Faults are
logged and the in-memory copy remains the source of truth.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
HISTORY_KEY = "predictionHistory"
LAST_LOCATION_KEY = "lastLocation"


class LocalStore:
    """JSON-file-backed string store with get/set/remove semantics.

    The file is read lazily on first access and rewritten on every
    mutation. Pass ``path=None`` for a purely in-memory store.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._data: dict[str, str] | None = None

    @property
    def path(self) -> Path | None:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data

        self._data = {}
        if self._path is None or not self._path.exists():
            return self._data

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read local storage from %s: %s", self._path, exc)
            return self._data

        if not isinstance(raw, dict):
            logger.error("Ignoring local storage at %s: expected a JSON object", self._path)
            return self._data

        self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        return self._data

    def _flush(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            logger.error("Failed to write local storage to %s: %s", self._path, exc)

    def get(self, key: str) -> str | None:
        """Return the stored text for ``key``, or None when absent."""
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``. Write failures are logged, not raised."""
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""
        data = self._load()
        if key in data:
            del data[key]
            self._flush()

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode the JSON value under ``key``; corrupt entries yield ``default``."""
        text = self.get(key)
        if text is None:
            return default
        try:
            return json.loads(text)
        except ValueError as exc:
            logger.warning("Discarding corrupt %r entry in local storage: %s", key, exc)
            return default

    def set_json(self, key: str, value: Any) -> None:
        """JSON-encode ``value`` and store it under ``key``."""
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Failed to encode %r for local storage: %s", key, exc)
            return
        self.set(key, text)
