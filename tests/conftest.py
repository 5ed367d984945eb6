from __future__ import annotations

import json
import threading
from typing import Any

import pytest
import requests
from werkzeug.serving import make_server

from fittracker.client import FitTrackerClient
from fittracker.mock_server import create_app
from fittracker.session import MemoryStore, Session

USERS = {"alex": "correct-horse"}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("FIT_TRACKER_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("FIT_TRACKER_LOCAL", raising=False)
    monkeypatch.delenv("FIT_TRACKER_API_URL", raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")


@pytest.fixture
def live_server():
    app = create_app(users=USERS)
    server = make_server("127.0.0.1", 0, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_port}/api/v1"
    finally:
        server.shutdown()
        thread.join(timeout=5)


@pytest.fixture
def api(live_server) -> FitTrackerClient:
    return FitTrackerClient(base_url=live_server, session=Session(MemoryStore()))


@pytest.fixture
def logged_in(api) -> FitTrackerClient:
    api.login("alex", USERS["alex"])
    return api


def make_response(status: int = 200, body: Any = b"", headers: dict[str, str] | None = None,
                  url: str = "http://api.test/api/v1/weights") -> requests.Response:
    """Build a finished requests.Response without touching the network."""
    if isinstance(body, (dict, list)):
        body = json.dumps(body)
        headers = {"Content-Type": "application/json", **(headers or {})}
    resp = requests.Response()
    resp.status_code = status
    resp._content = body.encode() if isinstance(body, str) else body
    resp.headers.update(headers or {})
    resp.url = url
    resp.encoding = "utf-8"
    return resp


class RecordingTransport:
    """Stands in for requests.request and remembers every call."""

    def __init__(self, *responses: requests.Response):
        self.calls: list[dict[str, Any]] = []
        self._responses = list(responses)

    def queue(self, *responses: requests.Response) -> "RecordingTransport":
        self._responses.extend(responses)
        return self

    def __call__(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self._responses:
            return self._responses.pop(0)
        return make_response(200, {"ok": True})

    @property
    def last(self) -> dict[str, Any]:
        return self.calls[-1]

    def last_body(self) -> Any:
        data = self.last.get("data")
        return json.loads(data) if data is not None else None


@pytest.fixture
def transport(monkeypatch) -> RecordingTransport:
    fake = RecordingTransport()
    monkeypatch.setattr("fittracker.client.requests.request", fake)
    return fake


@pytest.fixture
def offline_client() -> FitTrackerClient:
    return FitTrackerClient(base_url="http://api.test/api/v1", session=Session(MemoryStore()))
