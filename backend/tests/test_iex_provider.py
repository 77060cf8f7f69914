import http.client
import json
from urllib.error import HTTPError, URLError

import pytest

from quotes.config.settings import settings
from quotes.providers import iex


class FakeResponse:
    def __init__(self, body: str | bytes) -> None:
        self.body = body

    def read(self) -> bytes:
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


def fake_urlopen(body: str | bytes, requested: list[str] | None = None):
    def _urlopen(request, timeout=None):
        if requested is not None:
            requested.append(request.full_url)
        return FakeResponse(body)

    return _urlopen


def raising_urlopen(exc: Exception):
    def _urlopen(request, timeout=None):
        raise exc

    return _urlopen


def test_fetch_quote_ok(monkeypatch) -> None:
    requested: list[str] = []
    payload = {"symbol": "AAPL", "companyName": "Apple Inc.", "latestPrice": 189.5, "peRatio": 30}
    monkeypatch.setattr(iex, "urlopen", fake_urlopen(json.dumps(payload), requested))

    lookup = iex.fetch_quote("AAPL")

    assert lookup.status == "ok"
    assert lookup.quote is not None
    assert lookup.quote.company_name == "Apple Inc."
    assert lookup.quote.latest_price == 189.5
    assert requested == ["https://api.iextrading.com/1.0/stock/AAPL/quote"]


def test_fetch_quote_appends_token(monkeypatch) -> None:
    requested: list[str] = []
    monkeypatch.setattr(iex, "urlopen", fake_urlopen('{"symbol": "AAPL"}', requested))
    monkeypatch.setattr(settings.upstream, "api_token", "secret")

    iex.fetch_quote("AAPL")

    assert requested == ["https://api.iextrading.com/1.0/stock/AAPL/quote?token=secret"]


@pytest.mark.parametrize("body", ["", "null", "{}", '{"symbol": null}', "[]"])
def test_fetch_quote_without_symbol_is_not_found(monkeypatch, body: str) -> None:
    monkeypatch.setattr(iex, "urlopen", fake_urlopen(body))

    lookup = iex.fetch_quote("NOPE")

    assert lookup.status == "not_found"
    assert lookup.quote is None


def test_fetch_quote_http_404_is_not_found(monkeypatch) -> None:
    error = HTTPError("https://example.test", 404, "Not Found", None, None)
    monkeypatch.setattr(iex, "urlopen", raising_urlopen(error))

    assert iex.fetch_quote("NOPE").status == "not_found"


def test_fetch_quote_server_error_is_error(monkeypatch) -> None:
    error = HTTPError("https://example.test", 503, "Unavailable", None, None)
    monkeypatch.setattr(iex, "urlopen", raising_urlopen(error))

    lookup = iex.fetch_quote("AAPL")

    assert lookup.status == "error"
    assert "503" in (lookup.detail or "")


@pytest.mark.parametrize(
    "exc",
    [
        URLError("down"),
        TimeoutError("slow"),
        ConnectionResetError("reset by peer"),
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        http.client.IncompleteRead(b"{"),
    ],
)
def test_fetch_quote_network_failure_is_error(monkeypatch, exc: Exception) -> None:
    monkeypatch.setattr(iex, "urlopen", raising_urlopen(exc))

    assert iex.fetch_quote("AAPL").status == "error"


def test_fetch_quote_invalid_json_is_error(monkeypatch) -> None:
    monkeypatch.setattr(iex, "urlopen", fake_urlopen("<html>oops</html>"))

    assert iex.fetch_quote("AAPL").status == "error"


def test_fetch_batch_keys_quotes_by_symbol(monkeypatch) -> None:
    requested: list[str] = []
    payload = {
        "AAPL": {"quote": {"symbol": "AAPL", "latestPrice": 1.0}},
        "MSFT": {"quote": {"symbol": "MSFT", "latestPrice": 2.0}},
        "BROKEN": {"news": []},
    }
    monkeypatch.setattr(iex, "urlopen", fake_urlopen(json.dumps(payload), requested))

    batch = iex.fetch_batch(["AAPL", "MSFT", "BROKEN"])

    assert set(batch) == {"AAPL", "MSFT"}
    assert batch["MSFT"].latest_price == 2.0
    assert "symbols=AAPL,MSFT,BROKEN" in requested[0]


def test_fetch_batch_raises_on_failure(monkeypatch) -> None:
    monkeypatch.setattr(iex, "urlopen", raising_urlopen(URLError("down")))

    with pytest.raises(iex.UpstreamError):
        iex.fetch_batch(["AAPL"])


def test_fetch_symbols_ignores_unknown_fields(monkeypatch) -> None:
    payload = [
        {"symbol": "A", "name": "Agilent Technologies Inc.", "exchange": "NYS", "iexId": "2"},
        {"symbol": "AA", "name": "Alcoa Corp.", "exchange": "NYS", "isEnabled": True},
    ]
    monkeypatch.setattr(iex, "urlopen", fake_urlopen(json.dumps(payload)))

    symbols = iex.fetch_symbols()

    assert [s.symbol for s in symbols] == ["A", "AA"]
    assert symbols[1].name == "Alcoa Corp."


def test_fetch_symbols_rejects_non_list(monkeypatch) -> None:
    monkeypatch.setattr(iex, "urlopen", fake_urlopen('{"error": "nope"}'))

    with pytest.raises(iex.UpstreamError):
        iex.fetch_symbols()


def test_fetch_quote_undecodable_body_is_error(monkeypatch) -> None:
    monkeypatch.setattr(iex, "urlopen", fake_urlopen(b"\xff\xfe{"))

    lookup = iex.fetch_quote("AAPL")

    assert lookup.status == "error"
    assert "undecodable" in (lookup.detail or "")


def test_fetch_batch_raises_on_dropped_connection(monkeypatch) -> None:
    error = http.client.RemoteDisconnected("Remote end closed connection without response")
    monkeypatch.setattr(iex, "urlopen", raising_urlopen(error))

    with pytest.raises(iex.UpstreamError):
        iex.fetch_batch(["AAPL"])


class ResetResponse(FakeResponse):
    def read(self) -> bytes:
        raise ConnectionResetError("reset by peer")


def test_fetch_quote_failure_while_reading_is_error(monkeypatch) -> None:
    monkeypatch.setattr(iex, "urlopen", lambda request, timeout=None: ResetResponse(""))

    assert iex.fetch_quote("AAPL").status == "error"
