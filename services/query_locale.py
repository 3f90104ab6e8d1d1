from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class QueryLocale:
    """Google News locale triple (interface language, country, edition id)."""

    hl: str
    gl: str
    ceid: str


CHINESE = QueryLocale(hl="zh-CN", gl="CN", ceid="CN:zh-Hans")
JAPANESE = QueryLocale(hl="ja", gl="JP", ceid="JP:ja")
KOREAN = QueryLocale(hl="ko", gl="KR", ceid="KR:ko")
US_ENGLISH = QueryLocale(hl="en-US", gl="US", ceid="US:en")

# Checked in order, first match wins.
_SCRIPT_LOCALES = (
    (re.compile(r"[\u4e00-\u9fff]"), CHINESE),  # CJK Unified Ideographs
    (re.compile(r"[\u3040-\u309f\u30a0-\u30ff]"), JAPANESE),  # Hiragana, Katakana
    (re.compile(r"[\uac00-\ud7af]"), KOREAN),  # Hangul Syllables
)


def detect_query_locale(query: str) -> QueryLocale:
    """Pick a single locale from the scripts present in the query."""
    for pattern, locale in _SCRIPT_LOCALES:
        if pattern.search(query or ""):
            return locale
    return US_ENGLISH
