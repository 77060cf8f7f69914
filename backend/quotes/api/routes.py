from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from quotes.schemas.quote import CompanyInfo, Quote
from quotes.service import QuoteService

router = APIRouter()


def get_quote_service(request: Request) -> QuoteService:
    service = getattr(request.app.state, "quote_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": "Symbol cache is not loaded."},
        )
    return service


@router.get("/health")
def health(service: QuoteService = Depends(get_quote_service)) -> dict:
    return {"status": "ok", "companies": len(service.symbol_cache)}


@router.get("/v1/quote/{symbol}", response_model=Quote, response_model_exclude_none=True)
def quote_endpoint(symbol: str, service: QuoteService = Depends(get_quote_service)) -> Quote:
    return service.get_quote(symbol)


@router.get("/v1/quotes", response_model=list[Quote], response_model_exclude_none=True)
def quotes_endpoint(
    q: str = Query(..., description="Comma separated symbols, e.g. AAPL,MSFT"),
    service: QuoteService = Depends(get_quote_service),
) -> list[Quote]:
    return service.get_quotes(q)


@router.get("/v1/company/{name}", response_model=list[CompanyInfo])
def company_endpoint(name: str, service: QuoteService = Depends(get_quote_service)) -> list[CompanyInfo]:
    return service.get_company_info(name)
