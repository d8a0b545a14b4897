"""JSON-LD extraction tests."""

import logging

from src.audit.structured_data import extract_schema_types


def _page(make_page, *blocks: str):
    scripts = "".join(f'<script type="application/ld+json">{b}</script>' for b in blocks)
    return make_page(f"<html><head>{scripts}</head><body></body></html>")


def test_no_blocks(make_page):
    assert extract_schema_types(make_page("<html><body><p>x</p></body></html>")) == []


def test_single_object(make_page):
    assert extract_schema_types(_page(make_page, '{"@context": "https://schema.org", "@type": "Article"}')) == [
        "Article"
    ]


def test_graph_container(make_page):
    block = '{"@graph": [{"@type": "Organization"}, {"@type": "WebSite"}, {"name": "untyped"}]}'
    assert extract_schema_types(_page(make_page, block)) == ["Organization", "WebSite"]


def test_type_list_is_flattened_one_level(make_page):
    block = '{"@type": ["Article", "NewsArticle"]}'
    assert extract_schema_types(_page(make_page, block)) == ["Article", "NewsArticle"]


def test_top_level_array(make_page):
    block = '[{"@type": "FAQPage"}, {"@type": "HowTo"}]'
    assert extract_schema_types(_page(make_page, block)) == ["FAQPage", "HowTo"]


def test_blocks_concatenate_in_document_order_with_duplicates(make_page):
    page = _page(make_page, '{"@type": "Article"}', '{"@type": "Organization"}', '{"@type": "Article"}')
    assert extract_schema_types(page) == ["Article", "Organization", "Article"]


def test_invalid_block_is_skipped_and_logged(make_page, caplog):
    page = _page(make_page, "{not json", '{"@type": "HowTo"}', "")
    with caplog.at_level(logging.WARNING, logger="src.audit.structured_data"):
        assert extract_schema_types(page) == ["HowTo"]
    assert sum("invalid json-ld block skipped" in r.message for r in caplog.records) == 2


def test_other_script_types_are_ignored(make_page):
    html = '<html><body><script>var x = {"@type": "Article"};</script></body></html>'
    assert extract_schema_types(make_page(html)) == []
