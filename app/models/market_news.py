from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SNIPPET_MAX_LENGTH = 300

SourceTag = Literal[
    "google-news",
    "reddit",
    "yahoo-finance",
    "reuters",
    "marketwatch",
    "prnewswire",
    "sec-edgar",
    "custom",
]

TimeWindow = Literal["24h", "7d", "30d", "all"]

# Native recency windows used by sources that support them (Reddit `t=`).
TIME_WINDOW_RANGES: Dict[str, str] = {
    "24h": "day",
    "7d": "week",
    "30d": "month",
    "all": "all",
}

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


class Engagement(BaseModel):
    """Social metrics; only Reddit-shaped payloads provide them."""

    model_config = _WIRE_CONFIG

    score: Optional[int] = None
    comments: Optional[int] = None


class MarketNewsItem(BaseModel):
    """
    Normalized news/social item, the single output shape of every source.

    Instances are frozen: the pipeline filters, groups and reorders items but
    never edits them.
    """

    model_config = _WIRE_CONFIG

    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    published_at: datetime
    snippet: str = Field(default="", max_length=SNIPPET_MAX_LENGTH)
    source: SourceTag
    site: str
    author: Optional[str] = None
    engagement: Optional[Engagement] = None


class SourceToggles(BaseModel):
    """Per-request source switches; every source is on unless turned off."""

    model_config = _WIRE_CONFIG

    google_news: bool = True
    reddit: bool = True
    yahoo_finance: bool = True
    reuters: bool = True
    market_watch: bool = True
    pr_newswire: bool = True
    sec_edgar: bool = True

    def is_enabled(self, key: str) -> bool:
        return bool(getattr(self, key, False))


class MarketNewsRequest(BaseModel):
    model_config = _WIRE_CONFIG

    keywords: List[str] = Field(default_factory=list)
    tickers: List[str] = Field(default_factory=list)
    subreddits: List[str] = Field(default_factory=list)
    time_window: TimeWindow = "24h"
    max_items: int = Field(default=50, ge=0)
    sources: SourceToggles = Field(default_factory=SourceToggles)
    custom_urls: List[str] = Field(
        default_factory=list,
        description="Endpoint templates containing a {query} placeholder.",
    )

    @field_validator("custom_urls", mode="before")
    @classmethod
    def _split_custom_urls(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split("\n")
        return [str(url).strip() for url in value if str(url).strip()]

    @property
    def query(self) -> str:
        """Keywords plus `$TICKER` terms, space separated."""
        return " ".join([*self.keywords, *(f"${ticker}" for ticker in self.tickers)])

    @property
    def time_range(self) -> str:
        return TIME_WINDOW_RANGES[self.time_window]


class MarketNewsResponse(BaseModel):
    model_config = _WIRE_CONFIG

    items: List[MarketNewsItem]
    total_count: int
    sources_queried: int
