"""Tests for document fetching."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import requests

from hsxctl.infrastructure import fetch
from hsxctl.infrastructure.fetch import fetch_text


class _FakeResponse:
    def __init__(self, text: str, status: int = 200) -> None:
        self.text = text
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestFetchText:
    def test_plain_path(self, tmp_path: Path) -> None:
        page = tmp_path / "page.html"
        page.write_text("<hsx></hsx>", encoding="utf-8")
        assert fetch_text(str(page)) == "<hsx></hsx>"

    def test_file_url(self, tmp_path: Path) -> None:
        page = tmp_path / "page.html"
        page.write_text("hello", encoding="utf-8")
        assert fetch_text(page.as_uri()) == "hello"

    def test_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            fetch_text(str(tmp_path / "missing.html"))

    def test_http_uses_requests(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []

        def fake_get(url: str, timeout: float) -> _FakeResponse:
            calls.append({"url": url, "timeout": timeout})
            return _FakeResponse("<hsx>hsx set variable a = 1</hsx>")

        monkeypatch.setattr(fetch.requests, "get", fake_get)
        text = fetch_text("https://example.test/app.html", timeout=3.0)
        assert text.startswith("<hsx>")
        assert calls == [{"url": "https://example.test/app.html", "timeout": 3.0}]

    def test_http_error_status_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(fetch.requests, "get", lambda url, timeout: _FakeResponse("", 404))
        with pytest.raises(requests.HTTPError):
            fetch_text("http://example.test/missing.html")
