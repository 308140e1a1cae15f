"""Table replacement stage - swaps located tables for new markup."""

import logging
import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..errors import NotFoundError
from ..models import SelectorPolicy
from .html_converter import parse_html
from .selector_resolver import describe, replaces_all
from .table_locator import TableLocator

logger = logging.getLogger(__name__)

TABLE_TAG_PATTERN = re.compile(r"<(/?)table\b[^>]*>", re.IGNORECASE)

Span = Tuple[int, int]


def line_offsets(text: str) -> List[int]:
    """Absolute offset of the start of every line (lines split on ``\\n``)."""
    offsets = [0]
    for line in text.split("\n")[:-1]:
        offsets.append(offsets[-1] + len(line) + 1)
    return offsets


def table_end(text: str, start: int) -> Optional[int]:
    """Offset just past the ``</table>`` balancing the ``<table`` at ``start``."""
    depth = 0
    for match in TABLE_TAG_PATTERN.finditer(text, start):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        else:
            depth += 1
    return None


class TableReplacer:
    """
    Replaces located tables with new markup while keeping the rest of the
    document byte-for-byte.

    Each located table's source span is found from the parser's recorded
    position and spliced. When a span cannot be determined the parsed tree
    is edited instead and reserialised.
    """

    def __init__(self, locator: Optional[TableLocator] = None):
        self.locator = locator or TableLocator()

    def replace(self, document_html: str, replacement_html: str, policy: SelectorPolicy) -> str:
        """
        Replace the table(s) selected by ``policy``.

        Args:
            document_html: Full document or fragment
            replacement_html: Markup inserted in place of each located table
            policy: Selection policy; the "all tables" preset replaces every match

        Returns:
            The document with the table(s) replaced

        Raises:
            NotFoundError: No table matched
        """
        soup = parse_html(document_html)
        tables = self.locator.locate(soup, policy, multiple_allowed=replaces_all(policy))
        if not tables:
            raise NotFoundError(f"No table matched {describe(policy)}", selector=describe(policy))

        spans = self._source_spans(document_html, tables)
        if spans is None:
            logger.warning("Could not map tables to source positions; replacing in the parsed tree")
            return self._replace_in_tree(soup, tables, replacement_html)

        result = document_html
        for start, end in reversed(spans):
            result = result[:start] + replacement_html + result[end:]

        logger.info(f"Replaced {len(spans)} table(s) matching {describe(policy)}")
        return result

    def _source_spans(self, text: str, tables: List[Tag]) -> Optional[List[Span]]:
        """Outermost source spans of ``tables`` in ascending order, or None if any is unknown."""
        offsets = line_offsets(text)
        spans: List[Span] = []

        for table in tables:
            if table.sourceline is None or table.sourcepos is None or table.sourceline > len(offsets):
                return None
            start = offsets[table.sourceline - 1] + table.sourcepos
            if text[start:start + 6].lower() != "<table":
                return None
            end = table_end(text, start)
            if end is None:
                return None
            spans.append((start, end))

        spans.sort()
        collapsed: List[Span] = []
        for span in spans:
            # A span inside the previous one belongs to a nested table
            if collapsed and span[0] < collapsed[-1][1]:
                continue
            collapsed.append(span)
        return collapsed

    def _replace_in_tree(self, soup: BeautifulSoup, tables: List[Tag], replacement_html: str) -> str:
        ids = {id(t) for t in tables}
        targets = [t for t in tables if not any(id(p) in ids for p in t.parents)]
        for table in targets:
            table.replace_with(parse_html(replacement_html))
        logger.info(f"Replaced {len(targets)} table(s) in the parsed tree")
        return str(soup)
