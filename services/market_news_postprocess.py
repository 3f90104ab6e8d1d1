from __future__ import annotations

from typing import Dict, Iterable, List

from app.models.market_news import MarketNewsItem


def cap_per_source(items: Iterable[MarketNewsItem], max_items: int) -> List[MarketNewsItem]:
    """
    Group by source tag (groups in first-seen order) and keep at most
    ``max_items`` of each group, in original order.

    Runs before deduplication, so a source whose results repeat URLs spends
    its cap on the repeats.
    """
    groups: Dict[str, List[MarketNewsItem]] = {}
    for item in items:
        groups.setdefault(item.source, []).append(item)
    capped: List[MarketNewsItem] = []
    for group in groups.values():
        capped.extend(group[: max(0, max_items)])
    return capped


def dedupe_by_url(items: Iterable[MarketNewsItem]) -> List[MarketNewsItem]:
    """First occurrence of each URL wins; later duplicates are dropped whole."""
    seen: set[str] = set()
    unique: List[MarketNewsItem] = []
    for item in items:
        if item.url in seen:
            continue
        seen.add(item.url)
        unique.append(item)
    return unique


def sort_by_recency(items: Iterable[MarketNewsItem]) -> List[MarketNewsItem]:
    # sorted() is stable with reverse=True, equal timestamps keep their order
    return sorted(items, key=lambda item: item.published_at, reverse=True)


def postprocess(items: Iterable[MarketNewsItem], max_items: int) -> List[MarketNewsItem]:
    return sort_by_recency(dedupe_by_url(cap_per_source(items, max_items)))
