"""
fittracker/session.py
─────────────────────
Bearer-token persistence.

The token lives in a small JSON key-value file:

    ~/.fit_tracker/storage.json
    {
      "access_token": "eyJhbGciOi…"
    }

Session is the only thing that writes it: login() stores the token,
logout() removes it. Every read goes back to the store, so two processes
sharing a home directory see each other's login/logout immediately.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from .config import tracker_home

log = logging.getLogger("fit_tracker.session")

TOKEN_KEY = "access_token"


class FileStore:
    """JSON-file backed key-value store (one file, whole-file rewrites)."""

    _lock = threading.RLock()

    def __init__(self, path: Path | str | None = None):
        self._path = Path(path) if path is not None else None

    @property
    def path(self) -> Path:
        # Resolved lazily so FIT_TRACKER_HOME changes are picked up.
        return self._path or tracker_home() / "storage.json"

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            log.warning("Unreadable token store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f, indent=2)
        tmp.replace(self.path)
        os.chmod(self.path, 0o600)

    def get(self, key: str) -> Any:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


class MemoryStore:
    """Process-local store with the FileStore interface."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class Session:
    """Owns the persisted bearer token for one API client."""

    def __init__(self, store: FileStore | MemoryStore | None = None):
        self.store = store if store is not None else FileStore()

    @property
    def token(self) -> str | None:
        try:
            value = self.store.get(TOKEN_KEY)
        except OSError as exc:
            log.error("Error getting token: %s", exc)
            return None
        return value or None

    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, token: str) -> None:
        try:
            self.store.set(TOKEN_KEY, token)
        except OSError as exc:
            log.error("Error setting token: %s", exc)
            return
        log.info("Session token stored")

    def logout(self) -> None:
        try:
            self.store.delete(TOKEN_KEY)
        except OSError as exc:
            log.error("Error removing token: %s", exc)
            return
        log.info("Session token cleared")
