from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from quotes.schemas.upstream import Symbol, UpstreamQuote

QUOTE_OK = "OK"
QUOTE_FAILED = "FAILED"


class CompanyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    exchange: str | None = None

    @classmethod
    def from_symbol(cls, record: Symbol) -> CompanyInfo:
        return cls(symbol=record.symbol, name=record.name, exchange=record.exchange)


class Quote(BaseModel):
    symbol: str
    status: Literal["OK", "FAILED"] = QUOTE_OK
    name: str | None = None
    exchange: str | None = None
    last_price: float | None = None
    change: float | None = None
    change_percent: float | None = None
    change_percent_ytd: float | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: int | None = None
    market_cap: int | None = None
    timestamp: int | None = None

    @classmethod
    def failed(cls, symbol: str) -> Quote:
        """Placeholder for a symbol whose data is unavailable."""
        return cls(symbol=symbol, status=QUOTE_FAILED)

    @classmethod
    def from_upstream(cls, upstream: UpstreamQuote, symbol: str | None = None) -> Quote:
        return cls(
            symbol=upstream.symbol or symbol,
            status=QUOTE_OK,
            name=upstream.company_name,
            exchange=upstream.primary_exchange,
            last_price=upstream.latest_price,
            change=upstream.change,
            change_percent=upstream.change_percent,
            change_percent_ytd=upstream.ytd_change,
            open=upstream.open,
            high=upstream.high,
            low=upstream.low,
            volume=upstream.latest_volume,
            market_cap=upstream.market_cap,
            timestamp=upstream.latest_update,
        )
