from __future__ import annotations

import pytest
import requests

from sentiment_map.errors import FetchError
from sentiment_map.http_client import HttpClient, HttpConfig
from sentiment_map.loader import DatasetLoader


class _FakeResponse:
    """Decodes like requests: text/* without a charset defaults to ISO-8859-1."""

    def __init__(self, status_code: int, body: bytes | str = b"", content_type: str = "text/csv"):
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.headers = {"Content-Type": content_type}
        self.encoding = "ISO-8859-1" if content_type.startswith("text/") and "charset" not in content_type else None

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "utf-8", errors="replace")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status={self.status_code}", response=self)


class _FakeSession(requests.Session):
    def __init__(self, response=None, exc: Exception | None = None):
        super().__init__()
        self.response = response
        self.exc = exc
        self.calls: list[tuple[str, float]] = []

    def get(self, url, timeout=None, **kwargs):
        self.calls.append((url, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


def _client(session: requests.Session) -> HttpClient:
    return HttpClient(HttpConfig(timeout_sec=3.0, user_agent="test"), session=session)


def test_get_text_returns_body_for_http_urls():
    session = _FakeSession(_FakeResponse(200, "Country,Region,RandomValue\n"))
    text = _client(session).get_text("https://example.org/geo_sentiments.csv")
    assert text.startswith("Country")
    assert session.calls == [("https://example.org/geo_sentiments.csv", 3.0)]
    assert session.headers["User-Agent"] == "test"


def test_non_success_status_raises_fetch_error_without_retry():
    session = _FakeSession(_FakeResponse(404))
    with pytest.raises(FetchError) as ei:
        _client(session).get_text("https://example.org/missing.csv")
    assert "404" in str(ei.value)
    assert len(session.calls) == 1


def test_network_error_raises_fetch_error():
    session = _FakeSession(exc=requests.ConnectionError("refused"))
    with pytest.raises(FetchError):
        _client(session).get_text("http://localhost:1/geo.csv")
    assert len(session.calls) == 1


def test_local_path_and_file_url(tmp_path):
    p = tmp_path / "geo.csv"
    p.write_text("Country,Region,RandomValue\nJapan,Tokyo,2\n", encoding="utf-8")
    client = _client(_FakeSession())
    assert "Tokyo" in client.get_text(str(p))
    assert "Tokyo" in client.get_text(p.as_uri())


def test_missing_file_raises_fetch_error(tmp_path):
    with pytest.raises(FetchError):
        _client(_FakeSession()).get_text(str(tmp_path / "nope.csv"))


def test_http_body_is_decoded_as_utf8_without_charset_header():
    body = "Country,Region,RandomValue\nTürkiye,İstanbul,2\n".encode("utf-8")
    session = _FakeSession(_FakeResponse(200, body, content_type="text/csv"))
    text = _client(session).get_text("https://example.org/geo_sentiments.csv")
    assert "Türkiye,İstanbul,2" in text


def test_http_body_with_bom_loads_like_a_local_file():
    body = "\ufeffCountry,Region,RandomValue\nTürkiye,İstanbul,2\n".encode("utf-8")
    session = _FakeSession(_FakeResponse(200, body, content_type="text/csv"))
    records = DatasetLoader(_client(session)).load("https://example.org/geo_sentiments.csv")
    assert [(r.country, r.region, r.sentiment) for r in records] == [("Türkiye", "İstanbul", 2)]
