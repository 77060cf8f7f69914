from __future__ import annotations

from collections.abc import Callable, Iterable

from quotes.logger import get_logger
from quotes.schemas.quote import CompanyInfo
from quotes.schemas.upstream import Symbol

logger = get_logger(__name__)


class SymbolCache:
    """Read-only list of known companies, built once at startup."""

    def __init__(self, companies: Iterable[CompanyInfo]) -> None:
        self._companies: tuple[CompanyInfo, ...] = tuple(companies)

    @classmethod
    def load(cls, fetch_symbols: Callable[[], list[Symbol]]) -> SymbolCache:
        logger.info("loading symbols into memory")
        companies = [
            CompanyInfo.from_symbol(record)
            for record in fetch_symbols()
            if record.symbol and record.name
        ]
        cache = cls(companies)
        logger.info("finished loading symbols into memory", loaded=len(cache))
        return cache

    def __len__(self) -> int:
        return len(self._companies)

    def search(self, name: str, limit: int = 10) -> list[CompanyInfo]:
        needle = name.casefold()
        if limit <= 0:
            return []
        matches: list[CompanyInfo] = []
        for company in self._companies:
            if needle in company.name.casefold():
                matches.append(company)
                if len(matches) >= limit:
                    break
        return matches
