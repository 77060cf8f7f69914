from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Symbol(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: str | None = None
    name: str | None = None
    exchange: str | None = None


class UpstreamQuote(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    symbol: str | None = None
    company_name: str | None = Field(default=None, alias="companyName")
    primary_exchange: str | None = Field(default=None, alias="primaryExchange")
    open: float | None = None
    high: float | None = None
    low: float | None = None
    latest_price: float | None = Field(default=None, alias="latestPrice")
    latest_volume: int | None = Field(default=None, alias="latestVolume")
    latest_update: int | None = Field(default=None, alias="latestUpdate")
    change: float | None = None
    change_percent: float | None = Field(default=None, alias="changePercent")
    ytd_change: float | None = Field(default=None, alias="ytdChange")
    market_cap: int | None = Field(default=None, alias="marketCap")


class QuoteLookup(BaseModel):
    symbol: str
    status: Literal["ok", "not_found", "error"]
    quote: UpstreamQuote | None = None
    detail: str | None = None
