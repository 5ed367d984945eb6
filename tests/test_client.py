from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
import requests

from conftest import make_response
from fittracker.client import FitTrackerClient, _date_str, handle_response
from fittracker.errors import ApiError, AuthError
from fittracker.session import MemoryStore, Session, TOKEN_KEY


# ── response normalisation ───────────────────────────────────────────────────

def test_204_returns_none_whatever_the_content_type():
    resp = make_response(204, b'{"ignored": true}', {"Content-Type": "application/json"})
    assert handle_response(resp) is None


def test_zero_content_length_returns_none_without_parsing():
    resp = make_response(200, b"not json", {"Content-Type": "application/json",
                                            "Content-Length": "0"})
    assert handle_response(resp) is None


def test_json_content_type_with_empty_body_returns_none():
    resp = make_response(200, b"", {"Content-Type": "application/json"})
    assert handle_response(resp) is None


def test_json_body_is_parsed():
    resp = make_response(200, [{"id": 1, "weight": 72.5, "date": "2024-03-01"}])
    assert handle_response(resp) == [{"id": 1, "weight": 72.5, "date": "2024-03-01"}]


def test_malformed_json_success_body_raises_with_raw_text():
    resp = make_response(200, b"{oops", {"Content-Type": "application/json; charset=utf-8"})
    with pytest.raises(ApiError) as info:
        handle_response(resp)
    assert "{oops" in info.value.message
    assert info.value.body == "{oops"


def test_non_json_success_returns_text_or_none():
    assert handle_response(make_response(200, b"pong", {"Content-Type": "text/plain"})) == "pong"
    assert handle_response(make_response(200, b"", {"Content-Type": "text/plain"})) is None


def test_error_with_validation_list():
    resp = make_response(422, {"detail": [{"msg": "X"}, {"msg": "Y"}]})
    with pytest.raises(ApiError) as info:
        handle_response(resp)
    assert info.value.message == "X; Y"
    assert info.value.status == 422


def test_error_with_text_body():
    resp = make_response(502, b"Bad Gateway", {"Content-Type": "text/html"})
    with pytest.raises(ApiError, match="Bad Gateway"):
        handle_response(resp)


def test_error_without_body_uses_status():
    with pytest.raises(ApiError, match=r"^Error: 500$"):
        handle_response(make_response(500, b""))


# ── request composition ───────────────────────────────────────────────────────

def test_no_authorization_header_without_token(offline_client, transport):
    offline_client.get_weights()
    headers = transport.last["headers"]
    assert "Authorization" not in headers
    assert headers["Content-Type"] == "application/json"
    assert transport.last["url"] == "http://api.test/api/v1/weights"


def test_bearer_header_when_token_stored(offline_client, transport):
    offline_client.session.login("tok-123")
    offline_client.get_profile()
    assert transport.last["headers"]["Authorization"] == "Bearer tok-123"


def test_token_is_read_at_call_time(transport):
    store = MemoryStore()
    client = FitTrackerClient(base_url="http://api.test", session=Session(store))
    client.get_weights()
    store.set(TOKEN_KEY, "late-token")
    client.get_weights()
    assert "Authorization" not in transport.calls[0]["headers"]
    assert transport.calls[1]["headers"]["Authorization"] == "Bearer late-token"


def test_caller_headers_cannot_override_reserved_ones(offline_client, transport):
    offline_client.request("GET", "/profile", headers={
        "authorization": "Bearer forged",
        "Content-Type": "text/plain",
        "X-Request-Id": "abc",
    })
    headers = transport.last["headers"]
    assert headers == {"X-Request-Id": "abc", "Content-Type": "application/json"}


def test_create_weight_strips_time_component(offline_client, transport):
    offline_client.create_weight(72.5, "2024-03-01T10:00:00Z")
    assert transport.last["method"] == "POST"
    assert transport.last_body() == {"weight": 72.5, "date": "2024-03-01"}


def test_update_weight_without_date_omits_it(offline_client, transport):
    offline_client.update_weight(7, 70)
    assert transport.last["method"] == "PUT"
    assert transport.last["url"].endswith("/weights/7")
    assert transport.last_body() == {"weight": 70}


def test_update_metric_with_datetime(offline_client, transport):
    offline_client.update_metric(3, {"index": 18.4}, datetime(2024, 5, 2, 23, 59))
    assert transport.last_body() == {"value": {"index": 18.4}, "date": "2024-05-02"}


def test_get_metrics_sends_only_supplied_filters(offline_client, transport):
    offline_client.get_metrics("muscle_index", date_to=date(2024, 6, 30))
    assert transport.last["params"] == {"metric_type": "muscle_index", "date_to": "2024-06-30"}


def test_delete_sends_no_body(offline_client, transport):
    transport.queue(make_response(204))
    assert offline_client.delete_metric(9) is None
    assert transport.last["method"] == "DELETE"
    assert transport.last["data"] is None


def test_invalid_date_rejected_before_request(offline_client, transport):
    with pytest.raises(ValueError):
        offline_client.create_weight(70, "yesterday")
    assert transport.calls == []


@pytest.mark.parametrize("weight", [float("nan"), float("inf"), "nan", "-inf"])
def test_non_finite_weight_rejected_before_request(offline_client, transport, weight):
    with pytest.raises(ValueError):
        offline_client.create_weight(weight, "2024-03-01")
    with pytest.raises(ValueError):
        offline_client.update_weight(1, weight)
    assert transport.calls == []


def test_date_str_variants():
    assert _date_str(date(2024, 1, 9)) == "2024-01-09"
    assert _date_str(datetime(2024, 1, 9, 1, 0, tzinfo=timezone.utc)) == "2024-01-09"
    assert _date_str(" 2024-01-09 ") == "2024-01-09"
    with pytest.raises(ValueError):
        _date_str(20240109)


@pytest.mark.parametrize("value", ["2024-03-01garbage", "2024-03-01x10:00", "2024-03-0"])
def test_date_str_rejects_trailing_junk(value):
    with pytest.raises(ValueError):
        _date_str(value)


def test_date_str_drops_time_after_t_or_space():
    assert _date_str("2024-03-01 10:00") == "2024-03-01"
    assert _date_str("2024-03-01T10:00:00Z") == "2024-03-01"


# ── session operations ────────────────────────────────────────────────────────

def test_login_persists_token(offline_client, transport):
    transport.queue(make_response(200, {"access_token": "abc", "token_type": "bearer"}))
    data = offline_client.login("alex", "pw")
    assert data == {"access_token": "abc", "token_type": "bearer"}
    assert offline_client.session.token == "abc"
    assert transport.last_body() == {"username": "alex", "password": "pw"}


def test_rejected_login_raises_auth_error(offline_client, transport):
    transport.queue(make_response(401, {"detail": "Incorrect username or password"}))
    with pytest.raises(AuthError, match="Incorrect username or password"):
        offline_client.login("alex", "nope")
    assert offline_client.session.token is None


def test_server_failure_on_login_is_plain_api_error(offline_client, transport):
    transport.queue(make_response(500, b""))
    with pytest.raises(ApiError) as info:
        offline_client.login("alex", "pw")
    assert not isinstance(info.value, AuthError)


def test_logout_is_local_only(offline_client, transport):
    offline_client.session.login("abc")
    offline_client.logout()
    assert offline_client.session.token is None
    assert transport.calls == []


def test_transport_errors_propagate_untranslated(offline_client, monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr("fittracker.client.requests.request", refuse)
    with pytest.raises(requests.ConnectionError):
        offline_client.get_weights()
