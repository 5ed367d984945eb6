"""
fittracker/profile.py
─────────────────────
Builds the PUT /profile body as a sparse patch: only fields that carry a
usable value are sent, everything else is left untouched on the server.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

log = logging.getLogger("fit_tracker.profile")

STRING_FIELDS = ("first_name", "last_name", "gender")
IMMUTABLE_FIELDS = ("username",)

MIN_AGE = 0
MAX_AGE = 150


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    number = _to_float(text)
    return int(number) if number is not None and number.is_integer() else None


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        result = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    # nan / inf do not survive JSON encoding
    if result != result or result in (float("inf"), float("-inf")):
        return None
    return result


NUMERIC_FIELDS: dict[str, Callable[[Any], Any]] = {
    "age":       _to_int,
    "height_cm": _to_float,
}


def build_profile_patch(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Strings are trimmed and dropped when empty; numbers are coerced and
    dropped when they do not parse. An age outside 0–150 raises ValueError.
    """
    patch: dict[str, Any] = {}
    for name, value in fields.items():
        if name in IMMUTABLE_FIELDS:
            log.warning("Ignoring immutable profile field %r", name)
            continue
        if value is None:
            continue
        if name in STRING_FIELDS:
            text = str(value).strip()
            if text:
                patch[name] = text
        elif name in NUMERIC_FIELDS:
            number = NUMERIC_FIELDS[name](value)
            if number is None:
                log.debug("Dropping unparseable %s=%r", name, value)
                continue
            if name == "age" and not MIN_AGE <= number <= MAX_AGE:
                raise ValueError(f"Please enter a valid age ({MIN_AGE}–{MAX_AGE}).")
            patch[name] = number
        else:
            log.warning("Ignoring unknown profile field %r", name)
    return patch
