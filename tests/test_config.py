from __future__ import annotations

from pathlib import Path

import pytest

from fisheries_pipeline.config import DEFAULT_MONGO_DB, get_settings, require_mongo_uri


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("MONGO_URI", "MONGO_DB", "DATA_DIR", "DATA_BASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    s = get_settings()
    assert s.mongo_uri == ""
    assert s.mongo_db == DEFAULT_MONGO_DB
    assert s.data_dir == Path("data")
    assert s.views_dir == Path("data") / "views"
    assert s.data_base_url is None
    assert s.log_level == "INFO"


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MONGO_URI", " mongodb://localhost ")
    monkeypatch.setenv("MONGO_DB", "mozambique")
    monkeypatch.setenv("DATA_DIR", "/tmp/extracts")
    monkeypatch.setenv("DATA_BASE_URL", "https://example.org/data")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    s = get_settings()
    assert s.mongo_uri == "mongodb://localhost"
    assert s.mongo_db == "mozambique"
    assert s.data_dir == Path("/tmp/extracts")
    assert s.data_base_url == "https://example.org/data"
    assert s.log_level == "DEBUG"
    assert require_mongo_uri(s) == "mongodb://localhost"


def test_require_mongo_uri_raises_when_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(RuntimeError):
        require_mongo_uri(get_settings())
