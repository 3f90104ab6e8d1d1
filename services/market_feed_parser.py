"""
RSS/Atom parsing for market news sources.

Both feed vocabularies are accepted transparently: RSS ``<item>`` with
``<link>`` text, ``<pubDate>`` and ``<description>``, and Atom ``<entry>`` with
``<link href>``, ``<published>`` and ``<summary>``. The result carries no
source/site; adapters stamp those.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from html import unescape
from typing import Any, List, Mapping, Optional

import feedparser

from app.core.logging import get_logger
from app.models.market_news import SNIPPET_MAX_LENGTH

logger = get_logger().bind(module="market_feed_parser")

_HTML_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class FeedEntry:
    """A parsed feed entry, before source/site are attached."""

    title: str
    url: str
    published_at: datetime
    snippet: str
    author: Optional[str] = None


def strip_markup(value: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    text = _HTML_TAG_RE.sub("", value or "")
    text = unescape(text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()[:max_length].strip()


def _struct_time_to_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    except Exception:
        return None


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    if isinstance(value, str):
        return value.strip()
    return ""


def _extract_url(entry: Mapping[str, Any]) -> str:
    # feedparser maps RSS <link> text and Atom <link href> onto "link", but also
    # copies a permalink <guid> there when the item has no <link>
    if not entry.get("guidislink"):
        link = _text(entry, "link")
        if link:
            return link
    links = entry.get("links")
    if isinstance(links, list):
        for link_entry in links:
            if isinstance(link_entry, Mapping):
                href = link_entry.get("href")
                if isinstance(href, str) and href.strip():
                    return href.strip()
    return ""


def _extract_published_at(entry: Mapping[str, Any], fetched_at: datetime) -> datetime:
    # RSS <pubDate> and Atom <published> both land in published_parsed
    return _struct_time_to_datetime(entry.get("published_parsed")) or fetched_at


def _extract_snippet(entry: Mapping[str, Any]) -> str:
    # RSS <description> and Atom <summary> both land in summary
    return strip_markup(_text(entry, "summary") or _text(entry, "description"))


def _extract_author(entry: Mapping[str, Any]) -> Optional[str]:
    author = _text(entry, "author")
    if author:
        return author
    detail = entry.get("author_detail")
    if isinstance(detail, Mapping):
        name = detail.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


def parse_feed(raw: str | bytes, *, include_author: bool = False) -> List[FeedEntry]:
    """
    Parse RSS or Atom XML into feed entries.

    Never raises: an unparseable document yields an empty list and entries
    without a title or link are skipped.
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    try:
        parsed = feedparser.parse(raw)
    except Exception as exc:
        logger.warning("market_feed_parse_failed", error=str(exc))
        return []

    entries = getattr(parsed, "entries", None) or []
    if not entries:
        if getattr(parsed, "bozo", False):
            logger.debug(
                "market_feed_malformed",
                error=str(getattr(parsed, "bozo_exception", "")),
            )
        return []

    fetched_at = datetime.now(timezone.utc)
    items: List[FeedEntry] = []
    skipped = 0
    for entry in entries:
        try:
            title = _text(entry, "title")
            url = _extract_url(entry)
            if not title or not url:
                skipped += 1
                continue
            items.append(
                FeedEntry(
                    title=title,
                    url=url,
                    published_at=_extract_published_at(entry, fetched_at),
                    snippet=_extract_snippet(entry),
                    author=_extract_author(entry) if include_author else None,
                )
            )
        except Exception as exc:
            skipped += 1
            logger.debug("market_feed_entry_failed", error=str(exc))

    if skipped:
        logger.debug("market_feed_entries_skipped", skipped=skipped, parsed=len(items))
    return items
