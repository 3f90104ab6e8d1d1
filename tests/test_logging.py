from __future__ import annotations

from app.core import logging as app_logging
from app.core.request_id import clear_request_id, set_request_id


def test_secret_keys_are_redacted():
    event = {"event": "market_news_source_failed", "api_key": "abc", "Authorization": "Bearer x", "source": "custom"}

    result = app_logging._secret_guard(None, "warning", event)

    assert result["api_key"] == "***redacted***"
    assert result["Authorization"] == "***redacted***"
    assert result["source"] == "custom"


def test_request_id_and_level_are_attached():
    set_request_id("rid-1")
    try:
        event = app_logging._add_request_id(None, "info", {"event": "x"})
        event = app_logging._add_level(None, "warning", event)
    finally:
        clear_request_id()

    assert event["request_id"] == "rid-1"
    assert event["level"] == "warning"


def test_mask_url_query():
    assert app_logging.mask_url_query("https://a.test/rss?token=abc&q=x") == "https://a.test/rss?***redacted***"
    assert app_logging.mask_url_query("https://a.test/rss") == "https://a.test/rss"
