#!/usr/bin/env python3
"""Tests for sorting, filtering and reordering records."""

from tableconv.models import ConversionOptions
from tableconv.stages.data_manipulation import (
    filter_and_reorder,
    is_numeric,
    manipulate,
    parse_field_list,
    sort_by_field,
)


PEOPLE = [
    {"name": "Charlie", "age": 35, "score": "85"},
    {"name": "alice", "age": 30, "score": "92"},
    {"name": "Bob", "age": 25, "score": "78"},
]

MIXED_CASE = [
    {"Name": "Charlie", "AGE": 35, "City": "Paris"},
    {"Name": "Alice", "AGE": 30, "City": "Rome"},
]


def test_parse_field_list():
    assert parse_field_list("name, age, city") == ["name", "age", "city"]
    assert parse_field_list('"full name", age, "email address"') == ["full name", "age", "email address"]
    assert parse_field_list("'a, b',c") == ["a, b", "c"]
    assert parse_field_list("  name  ,, ") == ["name"]
    assert parse_field_list("") == []
    assert parse_field_list("   ") == []


def test_sort_strings_case_insensitive():
    assert [r["name"] for r in sort_by_field(PEOPLE, "name")] == ["alice", "Bob", "Charlie"]
    assert [r["name"] for r in sort_by_field(PEOPLE, "NAME", "descending")] == ["Charlie", "Bob", "alice"]


def test_sort_numbers_and_numeric_strings():
    assert [r["age"] for r in sort_by_field(PEOPLE, "Age")] == [25, 30, 35]
    assert [r["score"] for r in sort_by_field(PEOPLE, "score", "descending")] == ["92", "85", "78"]


def test_sort_numeric_strings_with_commas_and_percent():
    rows = [{"v": "1,200"}, {"v": "300"}, {"v": "25%"}]
    assert [r["v"] for r in sort_by_field(rows, "v")] == ["25%", "300", "1,200"]


def test_sort_mixed_values_compare_as_text():
    rows = [{"v": "b"}, {"v": "10"}, {"v": "A"}]
    assert [r["v"] for r in sort_by_field(rows, "v")] == ["10", "A", "b"]


def test_missing_values_sort_first_ascending_last_descending():
    rows = [{"v": 2}, {"x": 1}, {"v": 1}]
    assert sort_by_field(rows, "v") == [{"x": 1}, {"v": 1}, {"v": 2}]
    assert sort_by_field(rows, "v", "descending") == [{"v": 2}, {"v": 1}, {"x": 1}]


def test_sort_is_stable():
    rows = [{"k": "1", "id": "a"}, {"k": "1", "id": "b"}, {"k": "0", "id": "c"}]
    assert [r["id"] for r in sort_by_field(rows, "k")] == ["c", "a", "b"]
    assert [r["id"] for r in sort_by_field(rows, "k", "descending")] == ["a", "b", "c"]


def test_sort_by_missing_field_keeps_order():
    assert sort_by_field(PEOPLE, "nonexistent") == PEOPLE
    assert sort_by_field(PEOPLE, "") == PEOPLE


def test_filter_and_reorder_keeps_original_casing():
    result = filter_and_reorder(MIXED_CASE, ["city", "name", "missing"])
    assert result == [{"City": "Paris", "Name": "Charlie"}, {"City": "Rome", "Name": "Alice"}]
    assert list(result[0]) == ["City", "Name"]


def test_filter_with_no_fields_is_identity():
    assert filter_and_reorder(MIXED_CASE, []) == MIXED_CASE


def test_manipulate_sorts_then_filters():
    options = ConversionOptions(sort_field="age", sort_order="descending", fields='"name"')
    assert manipulate(PEOPLE, options) == [{"name": "Charlie"}, {"name": "alice"}, {"name": "Bob"}]


def test_manipulate_leaves_non_record_data_alone():
    rows = [["b"], ["a"]]
    options = ConversionOptions(sort_field="0", fields="0")
    assert manipulate(rows, options) is rows
    assert manipulate([], options) == []


def test_is_numeric():
    assert is_numeric("1,234.50")
    assert is_numeric("-3")
    assert is_numeric("12%")
    assert is_numeric(4)
    assert not is_numeric("12,34")
    assert not is_numeric("abc")
    assert not is_numeric("")
    assert not is_numeric(True)
