from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fixtures import atom_document, atom_entry, rss_document, rss_item
from services.market_feed_parser import parse_feed, strip_markup


def test_rss_items_are_parsed():
    xml = rss_document([rss_item(description="<![CDATA[<p>Rates <b>unchanged</b></p>]]>")])

    items = parse_feed(xml)

    assert len(items) == 1
    item = items[0]
    assert item.title == "Fed holds rates"
    assert item.url == "https://example.com/fed"
    assert item.snippet == "Rates unchanged"
    assert item.published_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert item.author is None


def test_atom_entries_use_href_published_and_summary():
    xml = atom_document([atom_entry(href="https://example.com/atom/1")])

    items = parse_feed(xml)

    assert len(items) == 1
    assert items[0].url == "https://example.com/atom/1"
    assert items[0].published_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert items[0].snippet == "Rates unchanged"


def test_rss_and_atom_with_same_content_are_equivalent():
    rss = parse_feed(rss_document([rss_item()]))
    atom = parse_feed(atom_document([atom_entry()]))

    assert rss == atom


def test_entries_without_title_or_link_are_skipped():
    xml = rss_document(
        [
            rss_item(title="Kept", link="https://example.com/kept"),
            rss_item(title=None, link="https://example.com/untitled"),
            rss_item(title="No link", link=None),
        ]
    )

    items = parse_feed(xml)

    assert [item.title for item in items] == ["Kept"]


def test_guid_is_never_used_as_link():
    xml = rss_document(
        [
            rss_item(title="Guid only", link=None, guid="https://example.com/guid-only"),
            rss_item(title="Both", link="https://example.com/both", guid="https://example.com/both-guid"),
        ]
    )

    items = parse_feed(xml)

    assert [(item.title, item.url) for item in items] == [("Both", "https://example.com/both")]


def test_mixed_item_and_entry_nodes_keep_document_order():
    xml = rss_document(
        [
            rss_item(title="First", link="https://example.com/1"),
            atom_entry(title="Second", href="https://example.com/2"),
            rss_item(title="Third", link="https://example.com/3"),
        ]
    )

    items = parse_feed(xml)

    assert [(item.title, item.url) for item in items] == [
        ("First", "https://example.com/1"),
        ("Second", "https://example.com/2"),
        ("Third", "https://example.com/3"),
    ]


def test_missing_or_bad_date_defaults_to_now():
    before = datetime.now(timezone.utc)
    xml = rss_document(
        [
            rss_item(link="https://example.com/1", pub_date=None),
            rss_item(link="https://example.com/2", pub_date="not a date"),
        ]
    )

    items = parse_feed(xml)

    assert len(items) == 2
    for item in items:
        assert before - timedelta(seconds=1) <= item.published_at <= datetime.now(timezone.utc)


def test_snippet_is_truncated_to_300_characters():
    xml = rss_document([rss_item(description="x" * 1000)])

    items = parse_feed(xml)

    assert len(items[0].snippet) == 300


def test_unparseable_document_yields_no_items():
    assert parse_feed("this is not xml <<<") == []
    assert parse_feed(b"") == []


def test_author_only_extracted_on_request():
    xml = rss_document([rss_item(creator="Jane Doe")])

    assert parse_feed(xml)[0].author is None
    assert parse_feed(xml, include_author=True)[0].author == "Jane Doe"


def test_strip_markup_unescapes_and_collapses_whitespace():
    assert strip_markup("<p>AT&amp;T\n\n  beats</p>") == "AT&T beats"
