from __future__ import annotations

import json
import os
import stat

from fittracker.session import FileStore, MemoryStore, Session, TOKEN_KEY


def test_file_store_defaults_to_tracker_home(tmp_path):
    store = FileStore()
    assert store.path == tmp_path / "home" / "storage.json"


def test_login_writes_token_under_fixed_key(tmp_path):
    session = Session(FileStore(tmp_path / "storage.json"))
    session.login("abc")
    data = json.loads((tmp_path / "storage.json").read_text())
    assert data == {TOKEN_KEY: "abc"}
    assert stat.S_IMODE(os.stat(tmp_path / "storage.json").st_mode) == 0o600


def test_token_is_visible_to_other_sessions_immediately(tmp_path):
    path = tmp_path / "storage.json"
    writer, reader = Session(FileStore(path)), Session(FileStore(path))
    assert reader.token is None
    writer.login("shared")
    assert reader.token == "shared"
    writer.logout()
    assert reader.token is None
    assert not reader.is_authenticated()


def test_logout_keeps_other_keys(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({TOKEN_KEY: "abc", "locale": "de"}))
    Session(FileStore(path)).logout()
    assert json.loads(path.read_text()) == {"locale": "de"}


def test_corrupt_store_reads_as_logged_out(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json")
    session = Session(FileStore(path))
    assert session.token is None
    session.login("fresh")
    assert session.token == "fresh"


def test_empty_token_counts_as_absent():
    session = Session(MemoryStore({TOKEN_KEY: ""}))
    assert session.token is None


def test_logout_without_login_is_harmless(tmp_path):
    session = Session(FileStore(tmp_path / "missing" / "storage.json"))
    session.logout()
    assert session.token is None
