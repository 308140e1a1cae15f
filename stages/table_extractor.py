"""Table extraction stage - turns located <table> nodes into TableData."""

import logging
from typing import List, Optional

from bs4 import Tag

from ..models import TableData
from .table_locator import own_caption

logger = logging.getLogger(__name__)


class TableExtractor:
    """
    Extracts caption, header row and data rows from a <table> node.

    Extraction is read-only. Colspan/rowspan and attributes are ignored,
    nested tables contribute no rows to their parent.
    """

    def __init__(self, include_headers: bool = True, chunk_size: int = 100):
        """Initialize the extractor.

        Args:
            include_headers: Detect a header row (default: True)
            chunk_size: Tables processed per batch in extract_all (default: 100)
        """
        self.include_headers = include_headers
        self.chunk_size = max(1, int(chunk_size))

    def extract(self, table: Tag) -> TableData:
        """
        Extract one table.

        Args:
            table: A <table> node

        Returns:
            TableData with trimmed cell texts
        """
        caption_tag = own_caption(table)
        caption = caption_tag.get_text().strip() if caption_tag is not None else None

        rows = self._own_rows(table)
        headers: List[str] = []
        header_row: Optional[Tag] = None

        if self.include_headers:
            header_row, headers = self._detect_headers(table, rows)

        data_rows = []
        for tr in rows:
            if tr is header_row:
                continue
            cells = self._cells(tr)
            if not cells:
                continue
            data_rows.append([self._cell_text(cell) for cell in cells])

        return TableData(headers=headers, rows=data_rows, caption=caption)

    def extract_all(self, tables: List[Tag]) -> List[TableData]:
        """Extract every table, in order, processing them in fixed-size chunks."""
        extracted: List[TableData] = []
        for start in range(0, len(tables), self.chunk_size):
            chunk = tables[start:start + self.chunk_size]
            extracted.extend(self.extract(table) for table in chunk)
            if len(tables) > self.chunk_size:
                logger.debug(f"Extracted tables {start + 1}-{start + len(chunk)} of {len(tables)}")
        return extracted

    def _detect_headers(self, table: Tag, rows: List[Tag]):
        """Return (header_row, header_texts), or (None, []) when there is no header."""
        thead = self._own_thead(table)
        if thead is not None:
            first = thead.find("tr")
            if first is not None:
                cells = self._cells(first)
                if cells:
                    return first, [self._cell_text(cell) for cell in cells]

        # First row that has cells
        for tr in rows:
            cells = self._cells(tr)
            if not cells:
                continue
            if all(cell.name == "th" for cell in cells):
                return tr, [self._cell_text(cell) for cell in cells]
            break

        return None, []

    @staticmethod
    def _own_rows(table: Tag) -> List[Tag]:
        return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]

    @staticmethod
    def _own_thead(table: Tag) -> Optional[Tag]:
        for thead in table.find_all("thead"):
            if thead.find_parent("table") is table:
                return thead
        return None

    @staticmethod
    def _cells(tr: Tag) -> List[Tag]:
        return tr.find_all(["td", "th"], recursive=False)

    @staticmethod
    def _cell_text(cell: Tag) -> str:
        return cell.get_text().strip()
