"""JSON <-> table conversion and the nesting rules for extracted tables."""

import json
import logging
from typing import Any, Dict, List, Union

from ..errors import ConversionError
from ..models import ConversionOptions, TableData
from .input_guard import MAX_JSON_BYTES, MAX_NESTING_DEPTH, safe_json_loads

logger = logging.getLogger(__name__)

Records = Union[List[Dict[str, str]], List[List[str]]]


def cell_text(value: Any) -> str:
    """Text form of a JSON value placed in a table cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def table_to_records(table: TableData, include_headers: bool = True) -> Records:
    """
    Records for one table.

    Dicts keyed by header when the table has headers and they are wanted
    (cells beyond the header width are ignored, missing cells are absent),
    plain lists of cells otherwise.
    """
    if include_headers and table.headers:
        return [
            {header: row[i] for i, header in enumerate(table.headers) if i < len(row)}
            for row in table.rows
        ]
    return [list(row) for row in table.rows]


def tables_to_payload(tables: List[TableData], options: ConversionOptions) -> Any:
    """
    Shape extracted tables for JSON or native output.

    A single table yields its records, or ``{"caption", "data"}`` when it
    has a caption. Several tables with multiple tables requested, or any
    tables with ``always_nest``, yield a list of ``{caption?, data}``.
    """
    if not tables:
        raise ConversionError("No tables found in HTML")

    if len(tables) == 1 and not options.always_nest:
        table = tables[0]
        records = table_to_records(table, options.include_headers)
        if table.caption:
            return {"caption": table.caption, "data": records}
        return records

    nested = []
    for table in tables:
        entry: Dict[str, Any] = {}
        if table.caption:
            entry["caption"] = table.caption
        entry["data"] = table_to_records(table, options.include_headers)
        nested.append(entry)
    return nested


def records_to_table(data: Any, include_headers: bool = True) -> TableData:
    """
    Build a TableData from parsed JSON or native data.

    - list of dicts: columns from the first element's keys, in order
    - list of lists: positional rows
    - a single dict: a two-column Key/Value table
    - empty list: an empty table

    Raises:
        ConversionError: Any other shape
    """
    if isinstance(data, list):
        if not data:
            return TableData()

        first = data[0]
        if isinstance(first, dict):
            headers = [str(key) for key in first.keys()]
            keys = list(first.keys())
            rows = []
            for item in data:
                if not isinstance(item, dict):
                    raise ConversionError("Unsupported JSON structure: array mixes objects and other values")
                rows.append([cell_text(item.get(key)) for key in keys])
            return TableData(headers=headers, rows=rows)

        if isinstance(first, list):
            rows = []
            for item in data:
                if not isinstance(item, list):
                    raise ConversionError("Unsupported JSON structure: array mixes arrays and other values")
                rows.append([cell_text(value) for value in item])
            return TableData(rows=rows)

        raise ConversionError("Unsupported JSON structure: expected an array of objects or an array of arrays")

    if isinstance(data, dict):
        rows = [[str(key), cell_text(value)] for key, value in data.items()]
        headers = ["Key", "Value"] if include_headers else []
        return TableData(headers=headers, rows=rows)

    raise ConversionError(f"Unsupported JSON structure: {type(data).__name__}")


def dumps(data: Any, pretty: bool = False) -> str:
    """Serialise to JSON text, indented by two spaces when ``pretty``."""
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def loads(text: str, max_bytes: int = MAX_JSON_BYTES, max_depth: int = MAX_NESTING_DEPTH) -> Any:
    """Parse JSON text with the size and depth guards applied."""
    data = safe_json_loads(text, max_bytes=max_bytes, max_depth=max_depth)
    logger.debug(f"Parsed JSON input ({type(data).__name__})")
    return data
