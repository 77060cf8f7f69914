from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from quotes.api.routes import router
from quotes.logger import configure_logging, get_logger
from quotes.providers import iex
from quotes.service import QuoteService
from quotes.symbol_cache import SymbolCache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    symbol_cache = SymbolCache.load(iex.fetch_symbols)
    app.state.quote_service = QuoteService(symbol_cache)
    logger.info("quotes service ready", companies=len(symbol_cache))
    yield


app = FastAPI(title="quotes", lifespan=lifespan)
app.include_router(router)


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
