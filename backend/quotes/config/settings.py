from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UpstreamSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTES_UPSTREAM_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    quote_url: str = "https://api.iextrading.com/1.0/stock/{symbol}/quote"
    quotes_url: str = (
        "https://api.iextrading.com/1.0/stock/market/batch?symbols={symbols}&types=quote"
    )
    symbols_url: str = "https://api.iextrading.com/1.0/ref-data/symbols"
    timeout_seconds: float = 10.0
    api_token: str | None = None


class CircuitSettings(BaseModel):
    failure_threshold: int = 5
    reset_timeout_seconds: float = 30.0


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTES_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "QUOTES_LOG_LEVEL"),
    )
    log_format: str = Field(
        default="console",
        validation_alias=AliasChoices("LOG_FORMAT", "QUOTES_LOG_FORMAT"),
    )
    search_limit: int = 10

    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    circuit: CircuitSettings = Field(default_factory=CircuitSettings)


settings = Settings()
