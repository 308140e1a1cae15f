"""Sorting, filtering and field reordering over lists of records."""

import logging
import re
from functools import cmp_to_key
from typing import Any, Dict, List, Optional

from ..models import ConversionOptions

logger = logging.getLogger(__name__)

# Numbers as they appear in table cells: optional sign, thousands separators,
# optional decimals and a trailing percent sign.
NUMERIC_PATTERN = re.compile(r"^[-+]?(\d{1,3}(,\d{3})+|\d+)?(\.\d+)?%?$")


def parse_number(value: Any) -> Optional[float]:
    """Numeric value of ``value`` when it looks like a number, else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text or not any(ch.isdigit() for ch in text) or not NUMERIC_PATTERN.match(text):
        return None
    return float(text.replace(",", "").rstrip("%"))


def is_numeric(value: Any) -> bool:
    return parse_number(value) is not None


def parse_field_list(text: str) -> List[str]:
    """
    Split a comma-separated field list.

    Field names may be wrapped in double or single quotes to keep embedded
    commas and spaces, e.g. ``'"full name", age'`` gives ``["full name", "age"]``.
    """
    if not text or not text.strip():
        return []

    fields: List[str] = []
    current = ""
    quote_char = ""

    for char in text:
        if char in ("\"", "'") and not quote_char:
            quote_char = char
        elif quote_char and char == quote_char:
            quote_char = ""
        elif char == "," and not quote_char:
            fields.append(current.strip())
            current = ""
        else:
            current += char

    fields.append(current.strip())
    return [f for f in fields if f]


def find_key(row: Dict[str, Any], name: str) -> Optional[str]:
    """Actual key in ``row`` matching ``name`` case-insensitively."""
    target = name.lower()
    for key in row:
        if str(key).lower() == target:
            return key
    return None


def sort_by_field(rows: List[Dict[str, Any]], field: str, order: str = "ascending") -> List[Dict[str, Any]]:
    """
    Stable sort of ``rows`` by ``field`` (matched case-insensitively).

    Rows missing the field go first when ascending and last when descending.
    Two numeric-looking values compare as numbers, anything else compares as
    lower-cased text.
    """
    if not field or not field.strip():
        return rows

    target = field.strip()
    descending = (order or "").strip().lower() == "descending"

    def value_of(row):
        key = find_key(row, target) if isinstance(row, dict) else None
        return row[key] if key is not None else None

    def compare(a, b) -> int:
        a_value, b_value = value_of(a), value_of(b)
        if a_value is None and b_value is None:
            return 0
        if a_value is None:
            return -1 if not descending else 1
        if b_value is None:
            return 1 if not descending else -1

        a_num, b_num = parse_number(a_value), parse_number(b_value)
        if a_num is not None and b_num is not None:
            a_comp, b_comp = a_num, b_num
        else:
            a_comp, b_comp = str(a_value).lower(), str(b_value).lower()

        result = (a_comp > b_comp) - (a_comp < b_comp)
        return -result if descending else result

    return sorted(rows, key=cmp_to_key(compare))


def filter_and_reorder(rows: List[Dict[str, Any]], fields: List[str]) -> List[Dict[str, Any]]:
    """Keep only ``fields`` in each row, in the requested order, with the row's own key casing."""
    if not fields:
        return rows

    result = []
    for row in rows:
        picked = {}
        for name in fields:
            key = find_key(row, name)
            if key is not None:
                picked[key] = row[key]
        result.append(picked)
    return result


def manipulate(rows: Any, options: ConversionOptions) -> Any:
    """Sort then filter ``rows`` per ``options``. Non-record data is returned unchanged."""
    if not isinstance(rows, list) or not rows or not all(isinstance(row, dict) for row in rows):
        return rows

    result = rows
    if options.sort_field and options.sort_field.strip():
        logger.debug(f"Sorting {len(rows)} rows by '{options.sort_field}' ({options.sort_order})")
        result = sort_by_field(result, options.sort_field, options.sort_order)

    field_names = parse_field_list(options.fields)
    if field_names:
        logger.debug(f"Filtering fields: {field_names}")
        result = filter_and_reorder(result, field_names)

    return result
