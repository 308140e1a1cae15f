"""Input validation - size, shape and nesting guards run before any parsing."""

import csv
import io
import json
import logging
import re
from typing import Any

from ..errors import ValidationError
from ..models import FormatType

logger = logging.getLogger(__name__)

MAX_HTML_BYTES = 10 * 1024 * 1024
MAX_JSON_BYTES = 50 * 1024 * 1024
MAX_NESTING_DEPTH = 100

VOID_ELEMENTS = frozenset([
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
])

TAG_PATTERN = re.compile(r"<(/?)([a-zA-Z][\w:-]*)[^>]*?(/?)>")
TABLE_OPEN_PATTERN = re.compile(r"<table\b", re.IGNORECASE)


def html_nesting_depth(html: str) -> int:
    """Maximum tag nesting depth. Void and self-closed elements do not nest."""
    depth = 0
    max_depth = 0
    for closing, name, self_closing in TAG_PATTERN.findall(html):
        if name.lower() in VOID_ELEMENTS or self_closing:
            continue
        if closing:
            depth = max(0, depth - 1)
        else:
            depth += 1
            max_depth = max(max_depth, depth)
    return max_depth


def json_nesting_depth(text: str) -> int:
    """Maximum bracket nesting depth of JSON text, ignoring brackets inside strings."""
    depth = 0
    max_depth = 0
    in_string = False
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = in_string
        elif char == "\"":
            in_string = not in_string
        elif in_string:
            continue
        elif char in "{[":
            depth += 1
            max_depth = max(max_depth, depth)
        elif char in "}]":
            depth = max(0, depth - 1)
    return max_depth


def validate_html_input(html: Any, max_bytes: int = MAX_HTML_BYTES, max_depth: int = MAX_NESTING_DEPTH) -> str:
    """
    Check that ``html`` is a usable HTML document containing a table.

    Returns:
        The input unchanged

    Raises:
        ValidationError: Empty, oversized, table-less or too deeply nested input
    """
    if not isinstance(html, str) or not html.strip():
        raise ValidationError("Invalid HTML input: must be a non-empty string")

    size = len(html.encode("utf-8"))
    if size > max_bytes:
        raise ValidationError(f"HTML input too large: {size} bytes exceeds maximum of {max_bytes} bytes")

    if not TABLE_OPEN_PATTERN.search(html):
        raise ValidationError("No HTML table found in input")

    depth = html_nesting_depth(html)
    if depth > max_depth:
        raise ValidationError(f"HTML structure too complex: nesting depth {depth} exceeds maximum of {max_depth}")

    return html


def safe_json_loads(text: Any, max_bytes: int = MAX_JSON_BYTES, max_depth: int = MAX_NESTING_DEPTH) -> Any:
    """
    Parse JSON text with size and nesting limits.

    Raises:
        ValidationError: Empty, oversized, too deeply nested or malformed JSON
    """
    if not isinstance(text, str):
        raise ValidationError("Invalid JSON input: must be a non-empty string")

    size = len(text.encode("utf-8"))
    if size > max_bytes:
        raise ValidationError(f"JSON input too large: {size} bytes exceeds maximum of {max_bytes} bytes")

    if not text.strip():
        raise ValidationError("Invalid JSON input: input appears to be empty or whitespace-only")

    depth = json_nesting_depth(text)
    if depth > max_depth:
        raise ValidationError(f"JSON structure too complex: nesting depth {depth} exceeds maximum of {max_depth}")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"JSON parsing failed: {e}") from e


def validate_input(data: Any, fmt: FormatType, delimiter: str = ",") -> None:
    """
    Validate input data for the given source format.

    Raises:
        ValidationError: The data cannot be used as ``fmt`` input
    """
    if fmt is FormatType.OBJECT:
        if not isinstance(data, (dict, list)):
            raise ValidationError(
                f"Native object input must be an object or array, got {type(data).__name__}",
                source=fmt.value,
            )
        return

    if not isinstance(data, str):
        raise ValidationError(f"Input data must be a string for {fmt.value.upper()} input", source=fmt.value)
    if not data.strip():
        raise ValidationError("Input data is empty", source=fmt.value)

    if fmt is FormatType.HTML:
        validate_html_input(data)
    elif fmt is FormatType.CSV:
        delimiter = delimiter or ","
        if len(delimiter) != 1:
            raise ValidationError(f"CSV delimiter must be a single character, got {delimiter!r}", source=fmt.value)
        reader = csv.reader(io.StringIO(data), delimiter=delimiter)
        if not any(any(cell.strip() for cell in row) for row in reader):
            raise ValidationError("CSV input contains no rows", source=fmt.value)
    elif fmt is FormatType.JSON:
        parsed = safe_json_loads(data)
        if not isinstance(parsed, (dict, list)):
            raise ValidationError("JSON input must be an object or array", source=fmt.value)

    logger.debug(f"Validated {fmt.value} input ({len(data)} chars)")
