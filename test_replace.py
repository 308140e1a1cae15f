#!/usr/bin/env python3
"""Tests for replacing located tables while preserving the surrounding document."""

from unittest.mock import patch

import pytest

from tableconv.config import Config
from tableconv.errors import NotFoundError, ValidationError
from tableconv.models import CaptionSelector, ConversionOptions, UnderHeadingSelector
from tableconv.pipeline import TableConverter
from tableconv.stages.replacer import TableReplacer, line_offsets, table_end
from tableconv.stages.selector_resolver import resolve_selector


NEW = "<table><tr><td>new</td></tr></table>"


def make_config(**overrides):
    values = dict(
        csv_delimiter=",",
        include_headers=True,
        pretty_print=False,
        multiple_tables=False,
        max_html_bytes=10 * 1024 * 1024,
        max_json_bytes=50 * 1024 * 1024,
        max_nesting_depth=100,
        table_chunk_size=100,
        wrap_output=True,
        output_field_name="convertedData",
        fetch_timeout=10,
        log_level="INFO",
        log_file=None,
    )
    values.update(overrides)
    return Config(**values)


def test_fragment_stays_a_fragment():
    doc = '<p>Intro</p>\n<table id="a"><tr><td>1</td></tr></table>\n<p>Outro</p>'
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "first-table"))
    assert result == "<p>Intro</p>\n" + NEW + "\n<p>Outro</p>"
    assert "<html" not in result and "<body" not in result


def test_full_document_is_preserved_byte_for_byte():
    table = "<TABLE class=old border=1>\r\n  <tr><td>x &amp; y</td></tr>\r\n</TABLE>"
    doc = (
        "<!DOCTYPE html>\r\n<html>\r\n<head><title>T</title></head>\r\n<body>\r\n"
        "   <h1 class=title>Hello</h1>\r\n   " + table + "\r\n<!-- trailing -->\r\n</body>\r\n</html>\r\n"
    )
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "first-table"))
    assert result == doc.replace(table, NEW)


def test_all_tables_preset_replaces_every_table():
    doc = '<table id="a"></table>\n<div>\n  <table id="b"></table>\n</div>'
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "all-tables"))
    assert result == NEW + "\n<div>\n  " + NEW + "\n</div>"


def test_first_table_only_replaces_one():
    doc = '<table id="a"></table><table id="b"></table>'
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "first-table"))
    assert result == NEW + '<table id="b"></table>'


def test_last_table_replaces_the_last():
    doc = '<table id="a"></table><table id="b"></table>'
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "last-table"))
    assert result == '<table id="a"></table>' + NEW


def test_nested_tables_collapse_into_outermost():
    doc = '<p>x</p><table id="o"><tr><td><table id="i"><tr><td>1</td></tr></table></td></tr></table><p>y</p>'
    result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "all-tables"))
    assert result == "<p>x</p>" + NEW + "<p>y</p>"


def test_replace_under_heading_and_caption():
    doc = (
        "<h2>Old</h2>\n<table id=\"a\"></table>\n"
        "<h2>New</h2>\n<table id=\"b\"><caption>Keep</caption></table>\n<table id=\"c\"></table>"
    )
    result = TableReplacer().replace(doc, NEW, UnderHeadingSelector(2, "new", 2))
    assert result == doc.replace('<table id="c"></table>', NEW)

    result = TableReplacer().replace(doc, NEW, CaptionSelector("keep"))
    assert result == doc.replace('<table id="b"><caption>Keep</caption></table>', NEW)


def test_no_match_raises_not_found():
    with pytest.raises(NotFoundError):
        TableReplacer().replace("<table></table>", NEW, CaptionSelector("missing"))


def test_tree_fallback_when_positions_are_unknown():
    doc = '<div><table id="a"><tr><td>1</td></tr></table></div>'
    with patch.object(TableReplacer, "_source_spans", return_value=None):
        result = TableReplacer().replace(doc, NEW, resolve_selector("simple", "first-table"))
    assert result == "<div>" + NEW + "</div>"


def test_span_helpers():
    text = "ab\ncd\n<table><table></table></table>x"
    assert line_offsets(text) == [0, 3, 6]
    assert table_end(text, 6) == len(text) - 1
    assert table_end("<table>", 0) is None


def test_engine_converts_csv_replacement_to_html():
    converter = TableConverter(make_config())
    doc = "<p>a</p><table><tr><td>old</td></tr></table>"
    result = converter.replace_table(
        doc, "name,age\nAlice,30", resolve_selector("simple", "first-table"), replacement_format="csv"
    )
    assert result == (
        "<p>a</p><table><thead><tr><th>name</th><th>age</th></tr></thead>"
        "<tbody><tr><td>Alice</td><td>30</td></tr></tbody></table>"
    )


def test_engine_converts_json_replacement_to_html():
    converter = TableConverter(make_config())
    result = converter.replace_table("<table></table>", '[{"x": 1}]', replacement_format="json")
    assert "<th>x</th>" in result
    assert "<td>1</td>" in result


def test_engine_rejects_empty_replacement_and_missing_tables():
    converter = TableConverter(make_config())
    with pytest.raises(ValidationError):
        converter.replace_table("<table></table>", "  ")
    with pytest.raises(ValidationError):
        converter.replace_table("<p>no table</p>", NEW)


def test_engine_minifies_html_replacement_unless_pretty():
    converter = TableConverter(make_config())
    replacement = "<table>\n  <!-- new -->\n  <tr>\n    <td>new</td>\n  </tr>\n</table>"
    result = converter.replace_table("<p>a</p><table></table>", replacement)
    assert result == "<p>a</p><table><tr><td>new</td></tr></table>"

    pretty = converter.replace_table(
        "<p>a</p><table></table>", replacement, options=ConversionOptions(pretty_print=True)
    )
    assert pretty == "<p>a</p>" + replacement
