"""
fittracker/muscle_index.py
──────────────────────────
Muscle index = lean body mass / height_m², with LBM from the Boer formula:

  male / other:  LBM = 0.407 · weight_kg + 0.267 · height_cm − 19.2
  female:        LBM = 0.252 · weight_kg + 0.473 · height_cm − 48.3

The index is computed locally from the profile height and the most recent
weight record, then stored on the service as a "muscle_index" metric.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .client import FitTrackerClient

log = logging.getLogger("fit_tracker.muscle_index")

MUSCLE_INDEX = "muscle_index"


class MissingDataError(ValueError):
    """Profile height or a weight record is needed but absent."""


class CalculationError(ValueError):
    """The inputs produced a non-positive index."""


def _round_half_up(x: float) -> int:
    # ties go up, also for negatives (-2.5 -> -2)
    whole = math.floor(x)
    return whole + 1 if x - whole >= 0.5 else whole


def calculate_muscle_index(weight_kg: float | None, height_cm: float | None,
                           gender: str | None = None) -> float | None:
    if not weight_kg or not height_cm or height_cm <= 0:
        return None
    if str(gender or "").strip().lower() == "female":
        lbm = 0.252 * weight_kg + 0.473 * height_cm - 48.3
    else:
        lbm = 0.407 * weight_kg + 0.267 * height_cm - 19.2
    height_m = height_cm / 100
    index = lbm / (height_m * height_m)
    return _round_half_up(index * 10) / 10


def _height_cm(profile: Any) -> float | None:
    if not isinstance(profile, dict) or profile.get("height_cm") is None:
        return None
    try:
        height = float(profile["height_cm"])
    except (TypeError, ValueError):
        return None
    return height if height > 0 else None


def latest_weight(records: Any) -> float | None:
    """Weight of the newest record by date, or None."""
    if not isinstance(records, list):
        return None
    dated = [r for r in records if isinstance(r, dict) and r.get("date")]
    if not dated:
        return None
    newest = max(dated, key=lambda r: str(r["date"])[:10])
    weight = newest.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight <= 0:
        return None
    return float(weight)


def calculate_and_record(client: FitTrackerClient, today: date | None = None) -> float:
    """
    Compute today's muscle index from profile + latest weight and save it.
    Raises MissingDataError / CalculationError before anything is written.
    """
    profile = client.get_profile()
    weights = client.get_weights()

    height_cm = _height_cm(profile)
    if height_cm is None:
        raise MissingDataError(
            "Please set your height (cm) in Profile. "
            "It is used to calculate muscle index from your weight."
        )
    weight_kg = latest_weight(weights)
    if weight_kg is None:
        raise MissingDataError(
            "Add at least one weight record so we can calculate "
            "your muscle index from weight and height."
        )

    gender = profile.get("gender") if isinstance(profile, dict) else None
    index = calculate_muscle_index(weight_kg, height_cm, gender)
    if index is None or index <= 0:
        raise CalculationError("Could not compute muscle index with your current data.")

    day = today or date.today()
    client.create_metric(MUSCLE_INDEX, day, {"index": index})
    log.info("Muscle index %.1f recorded for %s", index, day.isoformat())
    return index
