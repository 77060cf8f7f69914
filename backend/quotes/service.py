from __future__ import annotations

from collections.abc import Callable

from quotes.circuit import CircuitBreaker
from quotes.config.settings import settings
from quotes.logger import get_logger
from quotes.providers import iex
from quotes.schemas.quote import CompanyInfo, Quote
from quotes.schemas.upstream import QuoteLookup, UpstreamQuote
from quotes.symbol_cache import SymbolCache

logger = get_logger(__name__)


def split_symbols(csv_symbols: str) -> list[str]:
    return [token.strip() for token in csv_symbols.split(",") if token.strip()]


class QuoteService:
    """Company and quote lookups with a FAILED-placeholder fallback."""

    def __init__(
        self,
        symbol_cache: SymbolCache,
        breaker: CircuitBreaker | None = None,
        fetch_quote: Callable[[str], QuoteLookup] = iex.fetch_quote,
        fetch_batch: Callable[[list[str]], dict[str, UpstreamQuote]] = iex.fetch_batch,
        search_limit: int | None = None,
    ) -> None:
        self.symbol_cache = symbol_cache
        self.breaker = breaker or CircuitBreaker(
            "upstream-quotes",
            failure_threshold=settings.circuit.failure_threshold,
            reset_timeout=settings.circuit.reset_timeout_seconds,
        )
        self._fetch_quote = fetch_quote
        self._fetch_batch = fetch_batch
        self.search_limit = search_limit if search_limit is not None else settings.search_limit

    def get_quote(self, symbol: str) -> Quote:
        if not self.breaker.allow_request():
            logger.debug("quote fallback", symbol=symbol, reason="circuit_open")
            return Quote.failed(symbol)

        try:
            lookup = self._fetch_quote(symbol)
        except Exception as exc:
            self.breaker.record_failure()
            logger.warning("quote request failed", symbol=symbol, error=repr(exc))
            return Quote.failed(symbol)
        if lookup.status == "error":
            self.breaker.record_failure()
        else:
            self.breaker.record_success()

        if lookup.status != "ok" or lookup.quote is None:
            logger.debug("quote fallback", symbol=symbol, reason=lookup.status, detail=lookup.detail)
            return Quote.failed(symbol)
        return Quote.from_upstream(lookup.quote, symbol)

    def get_quotes(self, csv_symbols: str) -> list[Quote]:
        symbols = split_symbols(csv_symbols)
        if not symbols:
            return []
        logger.debug("retrieving multiple quotes", symbols=symbols)

        if not self.breaker.allow_request():
            logger.debug("batch fallback", symbols=symbols, reason="circuit_open")
            return [Quote.failed(symbol) for symbol in symbols]
        try:
            batch = self._fetch_batch(symbols)
        except Exception as exc:
            self.breaker.record_failure()
            logger.warning("batch quote request failed", symbols=symbols, error=repr(exc))
            return [Quote.failed(symbol) for symbol in symbols]
        self.breaker.record_success()

        quotes: list[Quote] = []
        for symbol in symbols:
            upstream = batch.get(symbol) or batch.get(symbol.upper())
            if upstream is None:
                logger.warning("quote could not be found", symbol=symbol)
                quotes.append(Quote.failed(symbol))
                continue
            quotes.append(Quote.from_upstream(upstream, symbol))
        return quotes

    def get_company_info(self, name: str) -> list[CompanyInfo]:
        return self.symbol_cache.search(name, limit=self.search_limit)
