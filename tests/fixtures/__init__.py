# tests/fixtures/__init__.py
"""
Factories for market news tests:
- make_item()
- rss_document() / atom_document()
- reddit_post() / reddit_listing()
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from app.models.market_news import MarketNewsItem


def make_item(
    url: str = "https://example.com/a",
    *,
    source: str = "google-news",
    title: str = "Headline",
    published_at: Optional[datetime] = None,
    site: str = "example.com",
) -> MarketNewsItem:
    return MarketNewsItem(
        title=title,
        url=url,
        published_at=published_at or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        snippet="",
        source=source,
        site=site,
    )


def rss_item(
    title: Optional[str] = "Fed holds rates",
    link: Optional[str] = "https://example.com/fed",
    pub_date: Optional[str] = "Mon, 01 Jan 2024 12:00:00 GMT",
    description: Optional[str] = "Rates unchanged",
    creator: Optional[str] = None,
    guid: Optional[str] = None,
) -> str:
    parts = []
    if title is not None:
        parts.append(f"<title>{title}</title>")
    if link is not None:
        parts.append(f"<link>{link}</link>")
    if pub_date is not None:
        parts.append(f"<pubDate>{pub_date}</pubDate>")
    if description is not None:
        parts.append(f"<description>{description}</description>")
    if creator is not None:
        parts.append(f"<dc:creator>{creator}</dc:creator>")
    if guid is not None:
        parts.append(f"<guid>{guid}</guid>")
    return "<item>" + "".join(parts) + "</item>"


def rss_document(items: Iterable[str]) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">'
        "<channel><title>Feed</title>"
        + "".join(items)
        + "</channel></rss>"
    )


def atom_entry(
    title: str = "Fed holds rates",
    href: str = "https://example.com/fed",
    published: Optional[str] = "2024-01-01T12:00:00Z",
    summary: Optional[str] = "Rates unchanged",
) -> str:
    parts = [f"<title>{title}</title>", f'<link rel="alternate" href="{href}" />']
    if published is not None:
        parts.append(f"<published>{published}</published>")
    if summary is not None:
        parts.append(f"<summary>{summary}</summary>")
    return "<entry>" + "".join(parts) + "</entry>"


def atom_document(entries: Iterable[str]) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<feed xmlns="http://www.w3.org/2005/Atom"><title>Feed</title>'
        + "".join(entries)
        + "</feed>"
    )


def reddit_post(
    title: str = "NVDA earnings thread",
    permalink: str = "/r/stocks/comments/abc/nvda_earnings_thread/",
    created_utc: float = 1704110400.0,
    selftext: str = "Discuss",
    author: str = "trader1",
    score: int = 42,
    num_comments: int = 7,
) -> Dict[str, Any]:
    return {
        "kind": "t3",
        "data": {
            "title": title,
            "permalink": permalink,
            "url": "https://i.redd.it/image.png",
            "created_utc": created_utc,
            "selftext": selftext,
            "author": author,
            "score": score,
            "num_comments": num_comments,
        },
    }


def reddit_listing(*posts: Dict[str, Any]) -> Dict[str, Any]:
    return {"kind": "Listing", "data": {"children": list(posts)}}
