"""CSV reading and writing."""

import csv
import io
import logging
from typing import Dict, List, Union

from ..errors import ValidationError
from ..models import TableData

logger = logging.getLogger(__name__)

Records = Union[List[Dict[str, str]], List[List[str]]]


def check_delimiter(delimiter: str) -> str:
    """Return the delimiter to use, rejecting anything but a single character."""
    delimiter = delimiter or ","
    if len(delimiter) != 1:
        raise ValidationError(f"CSV delimiter must be a single character, got {delimiter!r}")
    return delimiter


def parse_rows(text: str, delimiter: str = ",") -> List[List[str]]:
    """Split CSV text into rows, skipping blank lines."""
    reader = csv.reader(io.StringIO(text), delimiter=check_delimiter(delimiter))
    try:
        return [row for row in reader if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise ValidationError(f"CSV parsing error: {e}") from e


def parse_csv(text: str, delimiter: str = ",", include_headers: bool = True) -> Records:
    """
    Parse CSV text into records.

    With headers the first row is consumed as keys and each following row
    becomes a dict. Cells missing from a short row are absent from its dict,
    cells beyond the header width are ignored. Without headers every row is
    returned as a list.
    """
    rows = parse_rows(text, delimiter)
    if not include_headers:
        return rows
    if not rows:
        return []

    headers, body = rows[0], rows[1:]
    return [
        {header: row[i] for i, header in enumerate(headers) if i < len(row)}
        for row in body
    ]


def parse_table(text: str, delimiter: str = ",", include_headers: bool = True) -> TableData:
    """Parse CSV text straight into a TableData, first row as headers when wanted."""
    rows = parse_rows(text, delimiter)
    if include_headers and rows:
        return TableData(headers=rows[0], rows=rows[1:])
    return TableData(rows=rows)


def table_to_csv(table: TableData, delimiter: str = ",") -> str:
    """Render one table as CSV. A caption becomes a leading ``# caption`` line."""
    buffer = io.StringIO()
    if table.caption:
        buffer.write(f"# {table.caption}\n")

    writer = csv.writer(buffer, delimiter=check_delimiter(delimiter), lineterminator="\n")
    if table.headers:
        writer.writerow(table.headers)
    writer.writerows(table.rows)
    return buffer.getvalue().rstrip("\n")


def tables_to_csv(tables: List[TableData], delimiter: str = ",") -> str:
    """Render several tables as CSV blocks separated by a blank line."""
    logger.debug(f"Writing {len(tables)} table(s) as CSV")
    return "\n\n".join(table_to_csv(table, delimiter) for table in tables)
