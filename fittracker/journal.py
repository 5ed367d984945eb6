"""
fittracker/journal.py
─────────────────────
List state behind the weight journal and the metric (muscle index) views.

The server list is authoritative: add/edit re-fetch after the write, delete
drops the record locally once the server confirms and re-fetches when the
delete fails so the local list never shows a state the server does not have.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

import requests

from .client import FitTrackerClient
from .errors import ApiError
from .transform import sort_by_date

log = logging.getLogger("fit_tracker.journal")

_FAILURES = (ApiError, requests.RequestException)


class Journal(ABC):
    """Shared list state; subclasses say how to fetch and delete."""

    def __init__(self, client: FitTrackerClient):
        self.client = client
        self.records: list[dict[str, Any]] = []
        self.error: str | None = None

    @abstractmethod
    def _fetch(self) -> Any:
        ...

    @abstractmethod
    def _delete(self, record_id: Any) -> Any:
        ...

    def refresh(self) -> list[dict[str, Any]]:
        self.error = None
        try:
            data = self._fetch()
        except _FAILURES as exc:
            self.error = getattr(exc, "message", None) or str(exc)
            log.error("Error loading %s: %s", type(self).__name__, self.error)
            raise
        self.records = sort_by_date(data if isinstance(data, list) else [])
        return self.records

    def delete(self, record_id: Any) -> None:
        try:
            self._delete(record_id)
        except _FAILURES as exc:
            log.warning("Delete of %s failed (%s), reloading", record_id, exc)
            self._reload_after_failure()
            raise
        self.records = [r for r in self.records if str(r.get("id")) != str(record_id)]

    def _reload_after_failure(self) -> None:
        try:
            self.refresh()
        except _FAILURES as exc:
            log.error("Reload after failed delete also failed: %s", exc)


class WeightJournal(Journal):
    def _fetch(self) -> Any:
        return self.client.get_weights()

    def _delete(self, record_id: Any) -> Any:
        return self.client.delete_weight(record_id)

    def add(self, weight: float, day: date | datetime | str | None = None) -> list[dict[str, Any]]:
        self.client.create_weight(weight, day if day is not None else date.today())
        return self.refresh()

    def edit(self, record_id: Any, weight: float,
             day: date | datetime | str | None = None) -> list[dict[str, Any]]:
        self.client.update_weight(record_id, weight, day)
        return self.refresh()


class MetricJournal(Journal):
    def __init__(self, client: FitTrackerClient, metric_type: str):
        super().__init__(client)
        self.metric_type = metric_type

    def _fetch(self) -> Any:
        return self.client.get_metrics(self.metric_type)

    def _delete(self, record_id: Any) -> Any:
        return self.client.delete_metric(record_id)

    def add(self, value: Any, day: date | datetime | str | None = None) -> list[dict[str, Any]]:
        self.client.create_metric(self.metric_type, day if day is not None else date.today(), value)
        return self.refresh()

    def edit(self, record_id: Any, value: Any,
             day: date | datetime | str | None = None) -> list[dict[str, Any]]:
        self.client.update_metric(record_id, value, day)
        return self.refresh()
