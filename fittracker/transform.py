"""
fittracker/transform.py
───────────────────────
Shapes service records into what the journal charts display.

Weight chart:
{
  labels,   # ["3/1", "3/4", …]  M/D, last `limit` points, oldest first
  values,   # [72.5, 72.1, …]
}

Weight stats (muscle index stats share the shape, missing indexes count as 0):
{
  min, max,     # float
  avg,          # float, 1 decimal
  first, latest,
  difference,   # latest − first, 1 decimal
  count,
}
"""

from __future__ import annotations

from datetime import date
from typing import Any


def _day(record: dict[str, Any]) -> str:
    return str(record.get("date") or "")[:10]


def sort_by_date(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Oldest first; records without a date sort to the front."""
    return sorted(records, key=_day)


def _label(day: str) -> str:
    try:
        d = date.fromisoformat(day)
    except ValueError:
        return day
    return f"{d.month}/{d.day}"


def index_value(record: dict[str, Any]) -> float:
    """The stored {"index": n} of a muscle index record, 0 when absent."""
    value = record.get("value")
    idx = value.get("index") if isinstance(value, dict) else None
    if isinstance(idx, bool) or not isinstance(idx, (int, float)):
        return 0
    return idx


def weight_series(records: list[dict[str, Any]], limit: int = 7) -> dict[str, list]:
    ordered = sort_by_date(records)[-limit:]
    return {
        "labels": [_label(_day(r)) for r in ordered],
        "values": [r.get("weight") for r in ordered],
    }


def muscle_index_series(records: list[dict[str, Any]], limit: int = 7) -> dict[str, list]:
    ordered = sort_by_date(records)[-limit:]
    return {
        "labels": [_label(_day(r)) for r in ordered],
        "values": [index_value(r) for r in ordered],
    }


def _stats(values: list[float]) -> dict[str, Any] | None:
    if not values:
        return None
    first, latest = values[0], values[-1]
    return {
        "min":        min(values),
        "max":        max(values),
        "avg":        round(sum(values) / len(values), 1),
        "first":      first,
        "latest":     latest,
        "difference": round(latest - first, 1),
        "count":      len(values),
    }


def weight_stats(records: list[dict[str, Any]]) -> dict[str, Any] | None:
    weights = [float(r["weight"]) for r in sort_by_date(records)
               if isinstance(r.get("weight"), (int, float)) and not isinstance(r.get("weight"), bool)]
    return _stats(weights)


def muscle_index_stats(records: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Same summary as weight_stats; records without a numeric index count as 0."""
    return _stats([index_value(r) for r in sort_by_date(records)])
