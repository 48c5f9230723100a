from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import requests

from fisheries_pipeline.datasets import get_dataset
from fisheries_pipeline.load import fetch
from fisheries_pipeline.load.errors import DataLoadError


class _FakeResponse:
    def __init__(self, content: bytes, status: int = 200) -> None:
        self.content = content
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


def test_extract_url_joins_base() -> None:
    ds = get_dataset("taxa-sites")
    assert fetch.extract_url("https://host/data/", ds) == "https://host/data/taxa-sites.json"


def test_download_extract_writes_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def fake_get(url: str, timeout: float) -> Any:
        calls.append(url)
        return _FakeResponse(b"[]")

    monkeypatch.setattr(fetch.requests, "get", fake_get)
    path = fetch.download_extract(get_dataset("sites-stats"), "https://host", tmp_path)
    assert path.read_bytes() == b"[]"
    assert calls == ["https://host/sites-stats.json"]


def test_download_extract_uses_cache(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "sites-stats.json").write_text("[{}]", encoding="utf-8")

    def fail_get(url: str, timeout: float) -> Any:
        raise AssertionError("network should not be used")

    monkeypatch.setattr(fetch.requests, "get", fail_get)
    path = fetch.download_extract(get_dataset("sites-stats"), "https://host", tmp_path)
    assert path.read_text(encoding="utf-8") == "[{}]"


def test_download_extract_wraps_http_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(fetch.requests, "get", lambda url, timeout: _FakeResponse(b"", status=404))
    with pytest.raises(DataLoadError) as exc:
        fetch.download_extract(get_dataset("taxa-length"), "https://host", tmp_path, force=True)
    assert exc.value.dataset == "taxa-length"
