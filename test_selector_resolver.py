#!/usr/bin/env python3
"""Tests for turning presets and raw selectors into selection policies."""

import pytest

from tableconv.models import (
    CaptionSelector,
    SelectorMode,
    StandardSelector,
    TablePreset,
    UnderHeadingSelector,
)
from tableconv.stages.selector_resolver import (
    clamp_heading_level,
    describe,
    replaces_all,
    resolve_from_params,
    resolve_selector,
)


def test_advanced_mode_uses_raw_selectors():
    policy = resolve_selector("advanced", table_selector=" table.data ", element_selector="div#main")
    assert policy == StandardSelector("div#main", "table.data")


def test_advanced_mode_defaults_table_selector():
    policy = resolve_selector(SelectorMode.ADVANCED)
    assert policy == StandardSelector("", "table")


def test_preset_mapping():
    assert resolve_selector("simple", "all-tables") == StandardSelector("html", "table", match_all=True)
    assert resolve_selector("simple", "first-table") == StandardSelector("html", "table:first-of-type")
    assert resolve_selector("simple", TablePreset.LAST_TABLE) == StandardSelector(
        "html", "table:last-of-type", take_last=True
    )
    assert resolve_selector("simple", "custom", table_selector="table.x") == StandardSelector("html", "table.x")
    assert resolve_selector("simple", "custom") == StandardSelector("html", "table")


def test_under_heading_preset():
    policy = resolve_selector(
        "simple", "table-under-heading", heading_level=3, heading_text="  Results ", table_index=2
    )
    assert policy == UnderHeadingSelector(heading_level=3, heading_text="Results", table_index=2)
    assert policy.heading_selector == "h3"


def test_caption_preset_trims_text():
    policy = resolve_selector("simple", "table-with-caption", caption_text=" Revenue ")
    assert policy == CaptionSelector("Revenue")


def test_unknown_preset_falls_back_to_every_table():
    policy = resolve_selector("simple", "no-such-preset")
    assert policy == StandardSelector("html", "table")
    assert not replaces_all(policy)


@pytest.mark.parametrize("value", [0, -4, 1000, "abc", True, 2.5, None, ""])
def test_degenerate_heading_levels_clamp_to_one(value):
    assert clamp_heading_level(value) == 1


def test_valid_heading_levels_are_kept():
    assert clamp_heading_level(2) == 2
    assert clamp_heading_level("4") == 4
    assert clamp_heading_level(999) == 999
    assert clamp_heading_level(6.0) == 6


def test_table_index_below_one_becomes_one():
    policy = resolve_selector("simple", "table-under-heading", table_index=0)
    assert policy.table_index == 1
    policy = resolve_selector("simple", "table-under-heading", table_index="x")
    assert policy.table_index == 1


def test_resolve_from_params():
    policy = resolve_from_params({
        "selector_mode": "simple",
        "table_preset": "table-under-heading",
        "heading_level": "2",
        "heading_text": "Sales",
        "table_index": 3,
    })
    assert policy == UnderHeadingSelector(heading_level=2, heading_text="Sales", table_index=3)


def test_resolve_from_empty_params_selects_all_tables():
    policy = resolve_from_params({})
    assert replaces_all(policy)


def test_only_all_tables_replaces_all():
    assert replaces_all(resolve_selector("simple", "all-tables"))
    assert not replaces_all(resolve_selector("simple", "first-table"))
    assert not replaces_all(resolve_selector("simple", "table-with-caption"))
    assert not replaces_all(resolve_selector("advanced", table_selector="table"))


def test_describe_mentions_selectors():
    assert "h2" in describe(UnderHeadingSelector(2, "Sales"))
    assert "Revenue" in describe(CaptionSelector("Revenue"))
    assert "table.x" in describe(StandardSelector("div", "table.x"))
