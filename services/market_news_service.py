"""
Market news aggregation.

Fans a request out to every enabled source adapter on one shared httpx
client, waits for all of them (settle-all), then caps, dedupes and sorts the
combined items. No state survives the call.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Tuple

import httpx

from app.core.config import Settings, get_settings
from app.core.logging import get_logger
from app.models.market_news import MarketNewsItem, MarketNewsRequest, MarketNewsResponse
from services.market_news_postprocess import postprocess
from services.market_news_sources import MarketNewsSource, build_sources

logger = get_logger().bind(module="market_news_service")

Invocation = Tuple[MarketNewsSource, Dict[str, Any]]


def plan_invocations(
    request: MarketNewsRequest,
    sources: Sequence[MarketNewsSource],
) -> List[Invocation]:
    """Every (adapter, options) call implied by the toggles and preconditions."""
    return [
        (source, options)
        for source in sources
        for options in source.invocations(request)
    ]


def _bounded(call: Awaitable[List[MarketNewsItem]], timeout_s: Optional[float]):
    if timeout_s is None:
        return call
    return asyncio.wait_for(call, timeout=timeout_s)


async def gather_items(
    client: httpx.AsyncClient,
    request: MarketNewsRequest,
    invocations: Sequence[Invocation],
    *,
    timeout_s: Optional[float] = None,
) -> List[MarketNewsItem]:
    """Run all invocations concurrently; a failed one contributes nothing."""
    results = await asyncio.gather(
        *(
            _bounded(source.fetch(client, request, **options), timeout_s)
            for source, options in invocations
        ),
        return_exceptions=True,
    )

    combined: List[MarketNewsItem] = []
    for (source, options), result in zip(invocations, results):
        if isinstance(result, BaseException):
            logger.warning(
                "market_news_invocation_failed",
                source=source.source,
                error=source.describe_error(result) or type(result).__name__,
                error_type=type(result).__name__,
                **source.log_fields(options),
            )
            continue
        combined.extend(result)
    return combined


async def fetch_market_news(
    request: MarketNewsRequest,
    *,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    sources: Optional[Sequence[MarketNewsSource]] = None,
) -> MarketNewsResponse:
    """
    Aggregate market news for one request.

    Args:
        request: query terms, source toggles, window and per-source cap
        settings: defaults to the process settings
        client: shared HTTP client; one is created (and closed) when omitted
        sources: adapter set; defaults to every built-in source

    Returns:
        MarketNewsResponse with deduplicated items sorted newest first and
        the number of adapter invocations issued.
    """
    settings = settings or get_settings()
    sources = list(sources) if sources is not None else build_sources(settings)
    invocations = plan_invocations(request, sources)
    timeout_s = settings.MARKET_NEWS_SOURCE_TIMEOUT_S

    logger.info(
        "market_news_fetch_started",
        query=request.query,
        invocations=len(invocations),
        sources=sorted({source.source for source, _ in invocations}),
    )

    if client is None:
        async with httpx.AsyncClient(timeout=timeout_s) as own_client:
            combined = await gather_items(own_client, request, invocations, timeout_s=timeout_s)
    else:
        combined = await gather_items(client, request, invocations, timeout_s=timeout_s)

    items = postprocess(combined, request.max_items)

    logger.info(
        "market_news_fetch_finished",
        invocations=len(invocations),
        items_combined=len(combined),
        items_returned=len(items),
    )
    return MarketNewsResponse(
        items=items,
        total_count=len(items),
        sources_queried=len(invocations),
    )
