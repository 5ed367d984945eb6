"""
fittracker/client.py
────────────────────
REST client for the fit-tracker service.

Every call goes through FitTrackerClient.request(), which:
  - builds the absolute URL from the configured base URL,
  - always sends Content-Type: application/json,
  - adds Authorization: Bearer <token> only when a token is stored right now,
  - turns any non-2xx answer into ApiError with a readable message,
  - returns None for empty bodies, parsed JSON for JSON bodies, text otherwise.

Endpoints used (relative to the base URL):
  POST   /login                       → {access_token, token_type}
  GET    /weights                     → [weight record]
  POST   /weights                     {weight, date}
  PUT    /weights/{id}                {weight, date?}
  DELETE /weights/{id}
  GET    /metrics?metric_type=&date_from=&date_to=
  POST   /metrics                     {metric_type, date, value}
  PUT    /metrics/{id}                {value, date?}
  DELETE /metrics/{id}
  GET    /profile
  PUT    /profile                     sparse patch

No retries and no client-side timeout; connection errors surface as the
requests exception that caused them.
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any

import requests

from .config import api_base_url
from .errors import ApiError, AuthError, resolve_error_message
from .profile import build_profile_patch
from .session import Session

log = logging.getLogger("fit_tracker.client")

_RESERVED_HEADERS = {"authorization", "content-type"}

# YYYY-MM-DD, optionally followed by a time part
_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})(?:[T ].*)?", re.DOTALL)


# ── helpers ──────────────────────────────────────────────────────────────────

def _date_str(value: date | datetime | str) -> str:
    """Reduce a date-like value to YYYY-MM-DD, dropping any time component."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        match = _DATE_RE.fullmatch(value.strip())
        if match:
            try:
                return date.fromisoformat(match.group(1)).isoformat()
            except ValueError:
                pass
        raise ValueError(f"Invalid date: {value!r}")
    raise ValueError(f"Invalid date: {value!r}")


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {name}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {name}: {value!r}") from None
    # NaN / inf cannot be encoded as JSON
    if not math.isfinite(number):
        raise ValueError(f"Invalid {name}: {value!r}")
    return number


def _is_json(content_type: str) -> bool:
    return "application/json" in content_type.lower()


def handle_response(response: requests.Response) -> Any:
    """Normalise a finished response into a value or an ApiError."""
    status = response.status_code
    if not 200 <= status < 300:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        message = resolve_error_message(body, status)
        log.warning("%s %s → %s: %s", response.request.method if response.request else "?",
                    response.url, status, message)
        raise ApiError(message, status=status, body=body)

    if status == 204 or (response.headers.get("Content-Length") or "").strip() == "0":
        return None

    text = response.text
    if _is_json(response.headers.get("Content-Type", "")):
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as exc:
            raise ApiError(f"Invalid JSON response: {text}", status=status, body=text) from exc

    return text or None


# ── client ───────────────────────────────────────────────────────────────────

class FitTrackerClient:
    """
    One instance per signed-in user.

    Args:
        base_url: Overrides the environment-selected API URL.
        session:  Token owner; defaults to the file-backed Session.
    """

    def __init__(self, base_url: str | None = None, session: Session | None = None):
        self._base_url = base_url
        self.session = session if session is not None else Session()

    @property
    def base_url(self) -> str:
        return (self._base_url or api_base_url()).rstrip("/")

    def _headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {k: v for k, v in (extra or {}).items() if k.lower() not in _RESERVED_HEADERS}
        headers["Content-Type"] = "application/json"
        token = self.session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        log.debug("%s %s", method, url)
        response = requests.request(
            method,
            url,
            params=params,
            data=json.dumps(body) if body is not None else None,
            headers=self._headers(headers),
        )
        return handle_response(response)

    # ── auth ──────────────────────────────────────────────────────────────────

    def login(self, username: str, password: str) -> Any:
        """Exchange credentials for a bearer token and persist it."""
        try:
            data = self.request("POST", "/login", body={"username": username, "password": password})
        except ApiError as exc:
            if exc.status is not None and 400 <= exc.status < 500:
                raise AuthError(exc.message, status=exc.status, body=exc.body) from exc
            raise
        if isinstance(data, dict) and data.get("access_token"):
            self.session.login(data["access_token"])
        return data

    def logout(self) -> None:
        self.session.logout()

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    # ── weights ───────────────────────────────────────────────────────────────

    def get_weights(self) -> Any:
        return self.request("GET", "/weights")

    def create_weight(self, weight: float, day: date | datetime | str) -> Any:
        body = {"weight": _number(weight, "weight"), "date": _date_str(day)}
        return self.request("POST", "/weights", body=body)

    def update_weight(self, weight_id: Any, weight: float,
                      day: date | datetime | str | None = None) -> Any:
        body: dict[str, Any] = {"weight": _number(weight, "weight")}
        if day is not None:
            body["date"] = _date_str(day)
        return self.request("PUT", f"/weights/{weight_id}", body=body)

    def delete_weight(self, weight_id: Any) -> Any:
        return self.request("DELETE", f"/weights/{weight_id}")

    # ── metrics ───────────────────────────────────────────────────────────────

    def get_metrics(self, metric_type: str,
                    date_from: date | datetime | str | None = None,
                    date_to: date | datetime | str | None = None) -> Any:
        """List metric records of one type, optionally within an inclusive date range."""
        params = {"metric_type": metric_type}
        if date_from is not None:
            params["date_from"] = _date_str(date_from)
        if date_to is not None:
            params["date_to"] = _date_str(date_to)
        return self.request("GET", "/metrics", params=params)

    def create_metric(self, metric_type: str, day: date | datetime | str, value: Any) -> Any:
        body = {"metric_type": metric_type, "date": _date_str(day), "value": value}
        return self.request("POST", "/metrics", body=body)

    def update_metric(self, metric_id: Any, value: Any,
                      day: date | datetime | str | None = None) -> Any:
        body: dict[str, Any] = {"value": value}
        if day is not None:
            body["date"] = _date_str(day)
        return self.request("PUT", f"/metrics/{metric_id}", body=body)

    def delete_metric(self, metric_id: Any) -> Any:
        return self.request("DELETE", f"/metrics/{metric_id}")

    # ── profile ───────────────────────────────────────────────────────────────

    def get_profile(self) -> Any:
        return self.request("GET", "/profile")

    def update_profile(self, fields: dict[str, Any]) -> Any:
        return self.request("PUT", "/profile", body=build_profile_patch(fields))
