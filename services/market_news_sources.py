"""
Source adapters for the market news aggregator.

Every adapter turns one upstream provider into a list of MarketNewsItem.
``fetch`` never raises: network errors, non-2xx statuses and malformed payloads
are logged and become an empty result.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Union
from urllib.parse import quote, quote_plus, urlparse

import httpx

from app.core.config import Settings
from app.core.logging import get_logger, mask_url_query
from app.models.market_news import MarketNewsItem, MarketNewsRequest
from services.market_feed_parser import FeedEntry, parse_feed
from services.market_json_shapes import JsonEntry, map_json_payload
from services.query_locale import QueryLocale, detect_query_locale

logger = get_logger().bind(module="market_news_sources")

REDDIT_MAX_LIMIT = 100
REDDIT_SORTS = ("new", "relevance")

YAHOO_FINANCE_HEADLINE_URL = "https://feeds.finance.yahoo.com/rss/2.0/headline"
MARKETWATCH_TOP_STORIES_URL = "https://feeds.content.dowjones.io/public/rss/mw_topstories"
PRNEWSWIRE_NEWS_RELEASES_URL = "https://www.prnewswire.com/rss/news-releases-list.rss"
SEC_EDGAR_CURRENT_8K_URL = (
    "https://www.sec.gov/cgi-bin/browse-edgar?action=getcurrent&type=8-K"
    "&company=&dateb=&owner=include&start=0&count=40&output=atom"
)

Entry = Union[FeedEntry, JsonEntry]


def build_google_news_url(query: str, locale: QueryLocale) -> str:
    """Build the Google News RSS search URL for a query and locale."""
    return (
        "https://news.google.com/rss/search?"
        f"q={quote_plus(query)}&hl={locale.hl}&gl={locale.gl}&ceid={locale.ceid}"
    )


def build_reddit_search(query: str, subreddits: List[str], *, sort: str, time_range: str, limit: int):
    """Return (url, params) for a site-wide or subreddit-scoped search."""
    params: Dict[str, Any] = {"q": query}
    if subreddits:
        url = f"https://www.reddit.com/r/{'+'.join(subreddits)}/search.json"
        params["restrict_sr"] = 1
    else:
        url = "https://www.reddit.com/search.json"
    params.update({"sort": sort, "t": time_range, "limit": min(limit, REDDIT_MAX_LIMIT)})
    return url, params


def resolve_custom_url(template: str, query: str) -> str:
    return template.replace("{query}", quote(query, safe="-_.!~*'()"))


class MarketNewsSource(ABC):
    """
    Base adapter.

    Subclasses declare their ``source`` tag, ``site`` hostname and the
    ``toggle`` field on SourceToggles that switches them, and implement
    ``_fetch``. ``invocations`` returns one option dict per call the request
    implies; an empty list means the source is skipped.
    """

    source: ClassVar[str]
    site: ClassVar[str]
    toggle: ClassVar[Optional[str]] = None
    needs_query: ClassVar[bool] = False

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def is_applicable(self, request: MarketNewsRequest) -> bool:
        if self.toggle is not None and not request.sources.is_enabled(self.toggle):
            return False
        if self.needs_query and not request.query:
            return False
        return True

    def invocations(self, request: MarketNewsRequest) -> List[Dict[str, Any]]:
        return [{}] if self.is_applicable(request) else []

    def log_fields(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return dict(options)

    def describe_error(self, exc: BaseException) -> str:
        return str(exc)

    async def fetch(
        self,
        client: httpx.AsyncClient,
        request: MarketNewsRequest,
        **options: Any,
    ) -> List[MarketNewsItem]:
        try:
            items = await self._fetch(client, request, **options)
        except Exception as exc:
            logger.warning(
                "market_news_source_failed",
                source=self.source,
                error=self.describe_error(exc),
                error_type=type(exc).__name__,
                **self.log_fields(options),
            )
            return []
        logger.info(
            "market_news_source_fetched",
            source=self.source,
            items=len(items),
            **self.log_fields(options),
        )
        return items

    @abstractmethod
    async def _fetch(
        self,
        client: httpx.AsyncClient,
        request: MarketNewsRequest,
        **options: Any,
    ) -> List[MarketNewsItem]:
        raise NotImplementedError

    # ---- helpers ---------------------------------------------------------

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        response = await client.get(url, params=params, headers=headers, follow_redirects=True)
        response.raise_for_status()
        return response

    def _browser_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.settings.MARKET_NEWS_USER_AGENT}

    def _to_items(self, entries: Iterable[Entry], *, site: Optional[str] = None) -> List[MarketNewsItem]:
        return [
            MarketNewsItem(
                title=entry.title,
                url=entry.url,
                published_at=entry.published_at,
                snippet=entry.snippet,
                source=self.source,
                site=site or self.site,
                author=entry.author,
                engagement=getattr(entry, "engagement", None),
            )
            for entry in entries
        ]


class FeedSource(MarketNewsSource):
    """Adapter for a fixed RSS/Atom endpoint."""

    feed_url: ClassVar[str]
    include_author: ClassVar[bool] = False

    def _headers(self) -> Optional[Dict[str, str]]:
        return None

    async def _fetch(self, client, request, **options):
        response = await self._get(client, self.feed_url, headers=self._headers())
        return self._to_items(parse_feed(response.content, include_author=self.include_author))


class GoogleNewsSource(MarketNewsSource):
    source = "google-news"
    site = "news.google.com"
    toggle = "google_news"
    needs_query = True

    async def _fetch(self, client, request, **options):
        url = build_google_news_url(request.query, detect_query_locale(request.query))
        response = await self._get(client, url)
        return self._to_items(parse_feed(response.content))


class RedditSource(MarketNewsSource):
    """Reddit search, issued once per sort order; both result sets are merged upstream."""

    source = "reddit"
    site = "reddit.com"
    toggle = "reddit"
    needs_query = True

    def invocations(self, request):
        if not self.is_applicable(request):
            return []
        return [{"sort": sort} for sort in REDDIT_SORTS]

    async def _fetch(self, client, request, *, sort: str = "new", **options):
        url, params = build_reddit_search(
            request.query,
            request.subreddits,
            sort=sort,
            time_range=request.time_range,
            limit=request.max_items,
        )
        headers = {
            **self._browser_headers(),
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
        }
        response = await self._get(client, url, params=params, headers=headers)
        return self._to_items(map_json_payload(response.json()))


class YahooFinanceSource(MarketNewsSource):
    source = "yahoo-finance"
    site = "finance.yahoo.com"
    toggle = "yahoo_finance"

    def is_applicable(self, request):
        return super().is_applicable(request) and bool(request.tickers)

    async def _fetch(self, client, request, **options):
        if not request.tickers:
            return []
        params = {"s": ",".join(request.tickers), "region": "US", "lang": "en-US"}
        response = await self._get(client, YAHOO_FINANCE_HEADLINE_URL, params=params)
        return self._to_items(parse_feed(response.content))


class ReutersSource(MarketNewsSource):
    """
    Reuters has no public feed any more. The adapter is kept so the toggle
    stays meaningful; users with API access can add a custom URL instead.
    """

    source = "reuters"
    site = "reuters.com"
    toggle = "reuters"
    needs_query = True

    async def _fetch(self, client, request, **options):
        return []


class MarketWatchSource(FeedSource):
    source = "marketwatch"
    site = "marketwatch.com"
    toggle = "market_watch"
    feed_url = MARKETWATCH_TOP_STORIES_URL
    include_author = True

    def _headers(self):
        return self._browser_headers()


class PRNewswireSource(FeedSource):
    source = "prnewswire"
    site = "prnewswire.com"
    toggle = "pr_newswire"
    feed_url = PRNEWSWIRE_NEWS_RELEASES_URL


class SecEdgarSource(FeedSource):
    """Latest 8-K filings from the EDGAR current-events Atom feed."""

    source = "sec-edgar"
    site = "sec.gov"
    toggle = "sec_edgar"
    feed_url = SEC_EDGAR_CURRENT_8K_URL

    def _headers(self):
        return {"User-Agent": self.settings.SEC_EDGAR_USER_AGENT}


class CustomUrlSource(MarketNewsSource):
    """User-supplied endpoint templates with a ``{query}`` placeholder, one call each."""

    source = "custom"
    site = ""
    needs_query = True

    def invocations(self, request):
        if not self.is_applicable(request):
            return []
        return [{"template": template} for template in request.custom_urls]

    def log_fields(self, options):
        return {"template": mask_url_query(options.get("template", ""))}

    def describe_error(self, exc):
        # httpx status errors embed the full request url
        if isinstance(exc, httpx.HTTPStatusError):
            return f"HTTP {exc.response.status_code}"
        return str(exc)

    async def _fetch(self, client, request, *, template: str = "", **options):
        url = resolve_custom_url(template, request.query)
        response = await self._get(client, url, headers=self._browser_headers())
        site = urlparse(url).hostname or ""

        content_type = response.headers.get("content-type", "").lower()
        if "xml" in content_type or "rss" in content_type:
            return self._to_items(parse_feed(response.content), site=site)
        if "json" in content_type:
            return self._to_items(map_json_payload(response.json()), site=site)

        logger.debug(
            "market_news_custom_unsupported_content",
            url=mask_url_query(url),
            content_type=content_type,
        )
        return []


SOURCE_CLASSES = (
    GoogleNewsSource,
    RedditSource,
    YahooFinanceSource,
    ReutersSource,
    MarketWatchSource,
    PRNewswireSource,
    SecEdgarSource,
    CustomUrlSource,
)


def build_sources(settings: Settings) -> List[MarketNewsSource]:
    return [source_cls(settings) for source_cls in SOURCE_CLASSES]
