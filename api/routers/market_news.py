from __future__ import annotations

from fastapi import APIRouter

from app.models.market_news import MarketNewsRequest, MarketNewsResponse
from services.market_news_service import fetch_market_news

router = APIRouter(
    prefix="/market-news",
    tags=["market-news"],
)


@router.post("/fetch", response_model=MarketNewsResponse)
async def fetch_news(payload: MarketNewsRequest) -> MarketNewsResponse:
    """
    Fetch, merge and rank news for the given keywords/tickers.

    Unreachable sources are left out of the result; only unexpected errors in
    the request handling itself surface, through the app's 500 handler.
    """
    return await fetch_market_news(payload)
