"""
Registry of JSON response shapes the aggregator knows how to normalize.

Each shape pairs a recognizer predicate with a mapping function that turns the
payload into partial items. Supporting a new custom-endpoint format means
registering another shape; callers only ever go through ``map_json_payload``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional

from app.models.market_news import SNIPPET_MAX_LENGTH, Engagement

REDDIT_BASE_URL = "https://reddit.com"


@dataclass(frozen=True)
class JsonEntry:
    """A mapped JSON record, before source/site are attached."""

    title: str
    url: str
    published_at: datetime
    snippet: str
    author: Optional[str] = None
    engagement: Optional[Engagement] = None


@dataclass(frozen=True)
class JsonShape:
    name: str
    matches: Callable[[Any], bool]
    map: Callable[[Any], List[JsonEntry]]


def _epoch_to_datetime(value: Any) -> datetime:
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return datetime.now(timezone.utc)


def _optional_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _is_reddit_listing(payload: Any) -> bool:
    return (
        isinstance(payload, Mapping)
        and isinstance(payload.get("data"), Mapping)
        and isinstance(payload["data"].get("children"), list)
    )


def map_reddit_post(post: Mapping[str, Any]) -> Optional[JsonEntry]:
    """Map one listing child's ``data`` object; None when title or link is missing."""
    title = post.get("title")
    if not isinstance(title, str) or not title.strip():
        return None

    permalink = post.get("permalink")
    if isinstance(permalink, str) and permalink.strip():
        url = REDDIT_BASE_URL + permalink.strip()
    elif isinstance(post.get("url"), str) and post["url"].strip():
        url = post["url"].strip()
    else:
        return None

    author = post.get("author")
    selftext = post.get("selftext")
    return JsonEntry(
        title=title.strip(),
        url=url,
        published_at=_epoch_to_datetime(post.get("created_utc")),
        snippet=(selftext if isinstance(selftext, str) else "")[:SNIPPET_MAX_LENGTH],
        author=author if isinstance(author, str) and author else None,
        engagement=Engagement(
            score=_optional_int(post.get("score")),
            comments=_optional_int(post.get("num_comments")),
        ),
    )


def _map_reddit_listing(payload: Mapping[str, Any]) -> List[JsonEntry]:
    entries: List[JsonEntry] = []
    for child in payload["data"]["children"]:
        post = child.get("data") if isinstance(child, Mapping) else None
        if not isinstance(post, Mapping):
            continue
        entry = map_reddit_post(post)
        if entry is not None:
            entries.append(entry)
    return entries


REDDIT_LISTING = JsonShape(
    name="reddit-listing",
    matches=_is_reddit_listing,
    map=_map_reddit_listing,
)

_SHAPES: List[JsonShape] = [REDDIT_LISTING]


def register_json_shape(shape: JsonShape) -> None:
    if any(existing.name == shape.name for existing in _SHAPES):
        raise ValueError(f"json shape already registered: {shape.name}")
    _SHAPES.append(shape)


def registered_shapes() -> List[JsonShape]:
    return list(_SHAPES)


def recognize(payload: Any) -> Optional[JsonShape]:
    for shape in _SHAPES:
        if shape.matches(payload):
            return shape
    return None


def map_json_payload(payload: Any) -> List[JsonEntry]:
    """Map a payload through the first shape that recognizes it; unknown shapes map to nothing."""
    shape = recognize(payload)
    if shape is None:
        return []
    return shape.map(payload)
