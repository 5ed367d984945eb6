"""
fittracker/errors.py
────────────────────
The one error type callers see, and the pure function that turns an error
response body into a display message.

The service answers errors in a few shapes:

  {"message": "Weight not found"}
  {"detail": "Incorrect username or password"}                → DetailString
  {"detail": [{"loc": [...], "msg": "field required"}, …]}     → DetailList
  {"detail": {"age": "must be positive", "gender": [...]}}     → DetailMap
  <html>502 Bad Gateway</html>                                 → raw text
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


class ApiError(Exception):
    """Raised for any non-2xx response or malformed success body."""

    def __init__(self, message: str, status: int | None = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body


class AuthError(ApiError):
    """Raised by login() when the service rejects the credentials."""


# ── detail shapes ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DetailString:
    text: str


@dataclass(frozen=True)
class DetailList:
    items: tuple[Any, ...]


@dataclass(frozen=True)
class DetailMap:
    fields: tuple[tuple[str, Any], ...]


Detail = Union[DetailString, DetailList, DetailMap]

_SUB_FIELDS = ("msg", "message", "detail")


def parse_detail(raw: Any) -> Detail | None:
    if isinstance(raw, str):
        return DetailString(raw)
    if isinstance(raw, (list, tuple)):
        return DetailList(tuple(raw))
    if isinstance(raw, dict):
        return DetailMap(tuple((str(k), v) for k, v in raw.items()))
    return None


def _item_text(item: Any) -> str:
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        for key in _SUB_FIELDS:
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return ""
    if item is None:
        return ""
    return str(item)


def _field_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(t for t in (_item_text(v) for v in value) if t)
    return _item_text(value)


def detail_message(detail: Detail) -> str:
    """Flatten one detail shape into a single display string ("" if nothing usable)."""
    if isinstance(detail, DetailString):
        return detail.text.strip()
    if isinstance(detail, DetailList):
        return "; ".join(t for t in (_item_text(i) for i in detail.items) if t)
    pairs = []
    for name, value in detail.fields:
        text = _field_text(value)
        if text:
            pairs.append(f"{name}: {text}")
    return "; ".join(pairs)


def resolve_error_message(body: Any, status: int) -> str:
    """
    Pick the most useful message out of an error body.

    Order: top-level "message", then "detail" (string / list / mapping),
    then the raw text itself, then "Error: <status>".
    """
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        detail = parse_detail(body.get("detail"))
        if detail is not None:
            text = detail_message(detail)
            if text:
                return text
    elif isinstance(body, str) and body.strip():
        return body.strip()
    return f"Error: {status}"
