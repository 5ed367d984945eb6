"""
fittracker/mock_server.py
─────────────────────────
In-memory stand-in for the fit-tracker REST service.

Serves the same routes under /api/v1 as the production API and answers
errors in the same FastAPI-style bodies, so the client can be developed
against it (FIT_TRACKER_LOCAL=true) and round-trip tested without the
real backend.

Usage:
    python -m fittracker.mock_server            # port 8000
    PORT=9000 python -m fittracker.mock_server
"""

from __future__ import annotations

import logging
import os
import secrets
import threading
from datetime import date, datetime, timezone
from typing import Any

from flask import Blueprint, Flask, abort, current_app, jsonify, request
from flask_cors import CORS

log = logging.getLogger("fit_tracker.mock_server")

DEFAULT_USERS = {"demo": "demo1234"}
PROFILE_FIELDS = ("first_name", "last_name", "age", "gender", "height_cm")


class MockStore:
    """All server-side state for one app instance."""

    def __init__(self, users: dict[str, str]):
        self.lock      = threading.RLock()
        self.passwords = dict(users)
        self.tokens:   dict[str, str] = {}
        self.weights:  dict[int, dict[str, Any]] = {}
        self.metrics:  dict[int, dict[str, Any]] = {}
        self.profiles: dict[str, dict[str, Any]] = {
            name: {"username": name, **{f: None for f in PROFILE_FIELDS}} for name in users
        }
        self._next_id = 0

    def next_id(self) -> int:
        self._next_id += 1
        return self._next_id


bp = Blueprint("fit_tracker_api", __name__, url_prefix="/api/v1")


# ── helpers ──────────────────────────────────────────────────────────────────

def _store() -> MockStore:
    return current_app.extensions["fit_tracker_store"]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _fail(status: int, detail: Any):
    response = jsonify({"detail": detail})
    response.status_code = status
    abort(response)


def _field_error(field: str, msg: str, kind: str = "value_error") -> dict[str, Any]:
    return {"loc": ["body", field], "msg": msg, "type": kind}


def _current_user() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        _fail(401, "Not authenticated")
    with _store().lock:
        username = _store().tokens.get(token)
    if username is None:
        _fail(401, "Could not validate credentials")
    return username


def _valid_date(value: Any) -> bool:
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _valid_weight(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _owned(records: dict[int, dict[str, Any]], record_id: int, username: str,
           what: str) -> dict[str, Any]:
    record = records.get(record_id)
    if record is None or record["_owner"] != username:
        _fail(404, f"{what} not found")
    return record


def _public(record: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in record.items() if not k.startswith("_")}


# ── auth ──────────────────────────────────────────────────────────────────────

@bp.post("/login")
def login():
    body     = request.get_json(silent=True) or {}
    username = body.get("username")
    password = body.get("password")
    errors = [_field_error(f, "Field required", "missing")
              for f, v in (("username", username), ("password", password)) if not v]
    if errors:
        _fail(422, errors)

    store = _store()
    with store.lock:
        if store.passwords.get(username) != password:
            _fail(401, "Incorrect username or password")
        token = secrets.token_urlsafe(32)
        store.tokens[token] = username
    log.info("User %s logged in", username)
    return jsonify({"access_token": token, "token_type": "bearer"})


# ── weights ───────────────────────────────────────────────────────────────────

@bp.get("/weights")
def list_weights():
    username = _current_user()
    store = _store()
    with store.lock:
        rows = [_public(w) for w in store.weights.values() if w["_owner"] == username]
    rows.sort(key=lambda w: (w["date"], w["id"]))
    return jsonify(rows)


@bp.post("/weights")
def create_weight():
    username = _current_user()
    body = request.get_json(silent=True) or {}
    errors = []
    if not _valid_weight(body.get("weight")):
        errors.append(_field_error("weight", "Input should be a positive number"))
    if not _valid_date(body.get("date")):
        errors.append(_field_error("date", "Input should be a valid date in YYYY-MM-DD format"))
    if errors:
        _fail(422, errors)

    store = _store()
    with store.lock:
        record = {
            "id":         store.next_id(),
            "weight":     float(body["weight"]),
            "date":       body["date"],
            "created_at": _now(),
            "_owner":     username,
        }
        store.weights[record["id"]] = record
    return jsonify(_public(record)), 201


@bp.put("/weights/<int:weight_id>")
def update_weight(weight_id: int):
    username = _current_user()
    body = request.get_json(silent=True) or {}
    errors = []
    if "weight" in body and not _valid_weight(body["weight"]):
        errors.append(_field_error("weight", "Input should be a positive number"))
    if "date" in body and not _valid_date(body["date"]):
        errors.append(_field_error("date", "Input should be a valid date in YYYY-MM-DD format"))
    if errors:
        _fail(422, errors)

    store = _store()
    with store.lock:
        record = _owned(store.weights, weight_id, username, "Weight record")
        if "weight" in body:
            record["weight"] = float(body["weight"])
        if "date" in body:
            record["date"] = body["date"]
    return jsonify(_public(record))


@bp.delete("/weights/<int:weight_id>")
def delete_weight(weight_id: int):
    username = _current_user()
    store = _store()
    with store.lock:
        _owned(store.weights, weight_id, username, "Weight record")
        del store.weights[weight_id]
    return "", 204


# ── metrics ───────────────────────────────────────────────────────────────────

@bp.get("/metrics")
def list_metrics():
    username    = _current_user()
    metric_type = request.args.get("metric_type", "").strip()
    date_from   = request.args.get("date_from")
    date_to     = request.args.get("date_to")
    if not metric_type:
        _fail(422, [{"loc": ["query", "metric_type"], "msg": "Field required", "type": "missing"}])
    for name, value in (("date_from", date_from), ("date_to", date_to)):
        if value is not None and not _valid_date(value):
            _fail(422, [{"loc": ["query", name], "msg": "Input should be a valid date",
                         "type": "date_parsing"}])

    store = _store()
    with store.lock:
        rows = [
            _public(m) for m in store.metrics.values()
            if m["_owner"] == username
            and m["metric_type"] == metric_type
            and (date_from is None or m["date"] >= date_from)
            and (date_to is None or m["date"] <= date_to)
        ]
    rows.sort(key=lambda m: (m["date"], m["id"]))
    return jsonify(rows)


@bp.post("/metrics")
def create_metric():
    username = _current_user()
    body = request.get_json(silent=True) or {}
    errors = []
    if not isinstance(body.get("metric_type"), str) or not body["metric_type"].strip():
        errors.append(_field_error("metric_type", "Field required", "missing"))
    if not _valid_date(body.get("date")):
        errors.append(_field_error("date", "Input should be a valid date in YYYY-MM-DD format"))
    if "value" not in body:
        errors.append(_field_error("value", "Field required", "missing"))
    if errors:
        _fail(422, errors)

    store = _store()
    with store.lock:
        record = {
            "id":          store.next_id(),
            "metric_type": body["metric_type"].strip(),
            "date":        body["date"],
            "value":       body["value"],
            "created_at":  _now(),
            "_owner":      username,
        }
        store.metrics[record["id"]] = record
    return jsonify(_public(record)), 201


@bp.put("/metrics/<int:metric_id>")
def update_metric(metric_id: int):
    username = _current_user()
    body = request.get_json(silent=True) or {}
    if "date" in body and not _valid_date(body["date"]):
        _fail(422, [_field_error("date", "Input should be a valid date in YYYY-MM-DD format")])

    store = _store()
    with store.lock:
        record = _owned(store.metrics, metric_id, username, "Metric record")
        if "value" in body:
            record["value"] = body["value"]
        if "date" in body:
            record["date"] = body["date"]
    return jsonify(_public(record))


@bp.delete("/metrics/<int:metric_id>")
def delete_metric(metric_id: int):
    username = _current_user()
    store = _store()
    with store.lock:
        _owned(store.metrics, metric_id, username, "Metric record")
        del store.metrics[metric_id]
    return "", 204


# ── profile ───────────────────────────────────────────────────────────────────

@bp.get("/profile")
def get_profile():
    username = _current_user()
    with _store().lock:
        return jsonify(dict(_store().profiles[username]))


@bp.put("/profile")
def update_profile():
    username = _current_user()
    body = request.get_json(silent=True) or {}
    errors: dict[str, str] = {}
    if "username" in body:
        errors["username"] = "Username cannot be changed"
    age = body.get("age")
    if age is not None and (isinstance(age, bool) or not isinstance(age, int) or not 0 <= age <= 150):
        errors["age"] = "must be an integer between 0 and 150"
    height = body.get("height_cm")
    if height is not None and (isinstance(height, bool) or not isinstance(height, (int, float))
                               or height <= 0):
        errors["height_cm"] = "must be a positive number"
    if errors:
        _fail(422, errors)

    store = _store()
    with store.lock:
        profile = store.profiles[username]
        for field in PROFILE_FIELDS:
            if field in body:
                profile[field] = body[field]
        return jsonify(dict(profile))


# ── app factory ──────────────────────────────────────────────────────────────

def create_app(users: dict[str, str] | None = None) -> Flask:
    app = Flask(__name__)
    app.url_map.strict_slashes = False
    CORS(app, origins="*")
    app.extensions["fit_tracker_store"] = MockStore(users if users is not None else DEFAULT_USERS)
    app.register_blueprint(bp)

    # Always return JSON for errors, never HTML
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"detail": "Not Found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"detail": "Method Not Allowed"}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"detail": "Internal Server Error"}), 500

    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORT", 8000))
    log.info("Fit tracker mock API — port %d (users: %s)", port, ", ".join(DEFAULT_USERS))
    create_app().run(host="0.0.0.0", port=port, threaded=True)
