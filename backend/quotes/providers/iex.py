from __future__ import annotations

import http.client
import json
from typing import Any
from urllib.error import HTTPError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from quotes.config.settings import settings
from quotes.logger import get_logger
from quotes.schemas.upstream import QuoteLookup, Symbol, UpstreamQuote

logger = get_logger(__name__)


class UpstreamError(Exception):
    """Transport or decode failure talking to the market-data provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _with_token(url: str) -> str:
    token = settings.upstream.api_token
    if not token:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{urlencode({'token': token})}"


def _get_json(url: str) -> Any:
    """GET ``url`` and decode the body. Returns None for an empty body."""
    request = Request(_with_token(url), headers={"Accept": "application/json"})
    try:
        with urlopen(request, timeout=settings.upstream.timeout_seconds) as response:
            raw = response.read()
    except HTTPError as exc:
        raise UpstreamError(f"upstream returned HTTP {exc.code}", status_code=exc.code) from exc
    except (OSError, http.client.HTTPException) as exc:
        raise UpstreamError(f"upstream unreachable: {exc}") from exc

    try:
        body = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise UpstreamError("upstream returned undecodable body") from exc
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise UpstreamError("upstream returned invalid JSON") from exc


def fetch_quote(symbol: str) -> QuoteLookup:
    url = settings.upstream.quote_url.format(symbol=quote(symbol, safe=""))
    logger.debug("fetching quote", symbol=symbol)
    try:
        payload = _get_json(url)
    except UpstreamError as exc:
        if exc.status_code == 404:
            return QuoteLookup(symbol=symbol, status="not_found")
        return QuoteLookup(symbol=symbol, status="error", detail=str(exc))

    if not isinstance(payload, dict) or not payload.get("symbol"):
        return QuoteLookup(symbol=symbol, status="not_found")

    try:
        upstream_quote = UpstreamQuote.model_validate(payload)
    except ValidationError as exc:
        return QuoteLookup(symbol=symbol, status="error", detail=str(exc))
    return QuoteLookup(symbol=symbol, status="ok", quote=upstream_quote)


def fetch_batch(symbols: list[str]) -> dict[str, UpstreamQuote]:
    """Fetch quotes for many symbols in one call, keyed as upstream keys them."""
    joined = ",".join(quote(symbol, safe="") for symbol in symbols)
    url = settings.upstream.quotes_url.format(symbols=joined)
    logger.debug("fetching batch quotes", symbols=symbols)
    payload = _get_json(url)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise UpstreamError("batch response is not an object")

    quotes: dict[str, UpstreamQuote] = {}
    for key, entry in payload.items():
        if not isinstance(entry, dict) or not isinstance(entry.get("quote"), dict):
            continue
        try:
            quotes[key] = UpstreamQuote.model_validate(entry["quote"])
        except ValidationError:
            logger.warning("skipping malformed batch entry", symbol=key)
    return quotes


def fetch_symbols() -> list[Symbol]:
    payload = _get_json(settings.upstream.symbols_url)
    if not isinstance(payload, list):
        raise UpstreamError("symbol listing is not a list")
    try:
        return [Symbol.model_validate(item) for item in payload if isinstance(item, dict)]
    except ValidationError as exc:
        raise UpstreamError(f"malformed symbol listing: {exc}") from exc
