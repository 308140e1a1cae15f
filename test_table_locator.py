#!/usr/bin/env python3
"""Tests for locating tables with each selection policy."""

import pytest

from tableconv.errors import NotFoundError, ValidationError
from tableconv.models import CaptionSelector, StandardSelector, UnderHeadingSelector
from tableconv.stages.html_converter import parse_html
from tableconv.stages.selector_resolver import resolve_selector
from tableconv.stages.table_locator import TableLocator


SECTIONS = """
<h1>Report</h1>
<h2>Sales</h2>
<p>Intro</p>
<table id="s1"><tr><td>1</td></tr></table>
<div><table id="s2"><tr><td>2</td></tr></table></div>
<h3>Detail</h3>
<table id="s3"><tr><td>3</td></tr></table>
<h2>Costs</h2>
<table id="c1"><tr><td>4</td></tr></table>
"""


def ids(tables):
    return [t.get("id") for t in tables]


def locate(html, policy, multiple=False):
    return TableLocator().locate(parse_html(html), policy, multiple)


def test_first_and_last_table_presets():
    html = '<table id="a"></table><table id="b"></table><table id="c"></table>'
    assert ids(locate(html, resolve_selector("simple", "first-table"))) == ["a"]
    assert ids(locate(html, resolve_selector("simple", "last-table"))) == ["c"]


def test_last_table_across_containers():
    html = '<div><table id="a"></table></div><div><table id="b"></table></div>'
    assert ids(locate(html, resolve_selector("simple", "last-table"))) == ["b"]


def test_all_tables_in_document_order():
    html = '<table id="a"></table><div><table id="b"></table></div><table id="c"></table>'
    assert ids(locate(html, resolve_selector("simple", "all-tables"))) == ["a", "b", "c"]


def test_single_match_without_multiple():
    html = '<table id="a"></table><table id="b"></table>'
    assert ids(locate(html, StandardSelector("html", "table"))) == ["a"]
    assert ids(locate(html, StandardSelector("html", "table"), multiple=True)) == ["a", "b"]


def test_fragment_has_no_html_element_but_html_means_document():
    html = '<p>x</p><table id="a"></table>'
    assert ids(locate(html, StandardSelector("html", "table"))) == ["a"]
    assert ids(locate(html, StandardSelector("", "table"))) == ["a"]


def test_container_selector_limits_search():
    html = '<table id="out"></table><div class="content"><table id="in"></table></div>'
    policy = resolve_selector("advanced", element_selector="div.content", table_selector="table")
    assert ids(locate(html, policy)) == ["in"]


def test_nested_containers_do_not_duplicate_tables():
    html = '<div class="x"><div class="x"><table id="a"></table></div></div>'
    assert ids(locate(html, StandardSelector("div.x", "table"), multiple=True)) == ["a"]


def test_missing_container_suggests_general_selectors():
    with pytest.raises(NotFoundError) as exc:
        locate('<table></table>', StandardSelector("section.none", "table"))
    assert exc.value.selector == "section.none"
    assert any("html" in s for s in exc.value.suggestions)
    assert "section.none" in str(exc.value)


def test_no_matching_table_lists_suggestions():
    with pytest.raises(NotFoundError) as exc:
        locate('<table></table>', StandardSelector("html", "table.missing"))
    assert exc.value.selector == "table.missing"
    assert 2 <= len(exc.value.suggestions) <= 4
    assert "Suggestions:" in str(exc.value)


def test_invalid_table_selector_is_validation_error():
    with pytest.raises(ValidationError) as exc:
        locate('<table></table>', StandardSelector("html", "table["))
    assert "table selector" in str(exc.value)


def test_invalid_element_selector_is_validation_error():
    with pytest.raises(ValidationError) as exc:
        locate('<div><table></table></div>', StandardSelector("div[[", "table"))
    assert "element selector" in str(exc.value)


def test_under_heading_picks_indexed_table():
    policy = UnderHeadingSelector(heading_level=2, heading_text="sales", table_index=2)
    assert ids(locate(SECTIONS, policy)) == ["s2"]


def test_under_heading_includes_lower_rank_subsections():
    policy = UnderHeadingSelector(heading_level=2, heading_text="Sales", table_index=3)
    assert ids(locate(SECTIONS, policy)) == ["s3"]


def test_under_heading_stops_at_same_rank_heading():
    policy = UnderHeadingSelector(heading_level=2, heading_text="COSTS", table_index=1)
    assert ids(locate(SECTIONS, policy)) == ["c1"]
    policy = UnderHeadingSelector(heading_level=2, heading_text="Sales", table_index=4)
    # Out of range falls back to the first table of the section
    assert ids(locate(SECTIONS, policy)) == ["s1"]


def test_under_heading_out_of_range_falls_back_to_first(caplog):
    policy = UnderHeadingSelector(heading_level=2, heading_text="Costs", table_index=5)
    with caplog.at_level("WARNING"):
        assert ids(locate(SECTIONS, policy)) == ["c1"]
    assert "out of range" in caplog.text


def test_under_heading_skips_headings_without_tables():
    html = '<h2>Empty</h2><h2>Data</h2><table id="d"></table>'
    assert ids(locate(html, UnderHeadingSelector(2, "", 1))) == ["d"]


def test_under_heading_section_without_table_is_not_found():
    html = '<h2>Alpha</h2><h2>Beta</h2><table id="b"></table>'
    with pytest.raises(NotFoundError) as exc:
        locate(html, UnderHeadingSelector(2, "alpha", 1))
    assert "h2" in str(exc.value)
    assert "alpha" in str(exc.value)


def test_under_heading_skips_nested_tables():
    html = (
        '<h2>A</h2>'
        '<table id="outer"><tr><td><table id="inner"><tr><td>x</td></tr></table></td></tr></table>'
        '<table id="second"></table>'
    )
    assert ids(locate(html, UnderHeadingSelector(2, "A", 2))) == ["second"]


def test_under_heading_walks_out_of_heading_container():
    html = '<div><h2>Prices</h2></div><section><table id="p"></table></section>'
    assert ids(locate(html, UnderHeadingSelector(2, "prices", 1))) == ["p"]


def test_under_heading_matches_normalised_text():
    html = '<h2>Quarterly\n   <em>Sales</em></h2><table id="q"></table>'
    assert ids(locate(html, UnderHeadingSelector(2, "quarterly sales", 1))) == ["q"]


def test_caption_substring_case_insensitive():
    html = (
        '<table id="a"><caption>Quarterly Revenue</caption></table>'
        '<table id="n"></table>'
        '<table id="b"><caption>Annual revenue</caption></table>'
    )
    assert ids(locate(html, CaptionSelector("REVENUE"))) == ["a"]
    assert ids(locate(html, CaptionSelector("revenue"), multiple=True)) == ["a", "b"]
    assert ids(locate(html, CaptionSelector("annual"))) == ["b"]


def test_caption_not_found():
    with pytest.raises(NotFoundError) as exc:
        locate('<table><caption>Costs</caption></table>', CaptionSelector("Revenue"))
    assert "Revenue" in str(exc.value)


def test_caption_of_nested_table_does_not_match_outer():
    html = (
        '<table id="outer"><tr><td>'
        '<table id="inner"><caption>Totals</caption><tr><td>1</td></tr></table>'
        "</td></tr></table>"
    )
    assert ids(locate(html, CaptionSelector("totals"), multiple=True)) == ["inner"]
