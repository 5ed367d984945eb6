"""
fittracker/config.py
────────────────────
API environment selection.

  FIT_TRACKER_LOCAL=true      → talk to the local dev server (mock_server)
  FIT_TRACKER_API_URL=<url>   → explicit base URL, wins over the switch
  FIT_TRACKER_HOME=<dir>      → where the token store lives

Everything is read fresh from the environment so the switch can be flipped
per process (and per test) without reloading modules.
"""

from __future__ import annotations

import os
from pathlib import Path

LOCAL_API_URL      = "http://localhost:8000/api/v1"
PRODUCTION_API_URL = "https://fit-tracker-api.onrender.com/api/v1"

_TRUTHY = {"1", "true", "yes", "on"}


def is_local() -> bool:
    return os.environ.get("FIT_TRACKER_LOCAL", "false").strip().lower() in _TRUTHY


def get_environment() -> str:
    return "local" if is_local() else "production"


def api_base_url() -> str:
    override = os.environ.get("FIT_TRACKER_API_URL", "").strip()
    if override:
        return override.rstrip("/")
    return LOCAL_API_URL if is_local() else PRODUCTION_API_URL


def tracker_home() -> Path:
    return Path(os.environ.get("FIT_TRACKER_HOME", Path.home() / ".fit_tracker"))
