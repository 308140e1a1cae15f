"""Style stage - applies classes, inline CSS and table attributes to located tables."""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from bs4 import Tag

from ..models import SelectorPolicy, StandardSelector, StyleOptions
from .data_manipulation import is_numeric
from .html_converter import parse_html
from .table_locator import TableLocator, own_caption

logger = logging.getLogger(__name__)

ALL_TABLES = StandardSelector("html", "table", match_all=True)

WRAP_VALUES = {"wrap": "normal", "nowrap": "nowrap", "normal": "normal", "pre-wrap": "pre-wrap"}


def parse_style(style: Optional[str]) -> "OrderedDict[str, str]":
    """Parse ``"a: 1; b: 2"`` into an ordered property mapping."""
    declarations: "OrderedDict[str, str]" = OrderedDict()
    for declaration in (style or "").split(";"):
        prop, sep, value = declaration.partition(":")
        prop, value = prop.strip(), value.strip()
        if sep and prop and value:
            declarations[prop.lower()] = value
    return declarations


def format_style(declarations: Dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in declarations.items())


def merge_style(tag: Tag, updates: Dict[str, str]) -> None:
    """Merge declarations into ``tag``'s style attribute; new values win."""
    if not updates:
        return
    declarations = parse_style(tag.get("style"))
    declarations.update(updates)
    tag["style"] = format_style(declarations)


def add_class(tag: Tag, class_names: str) -> None:
    existing = tag.get("class") or []
    if isinstance(existing, str):
        existing = existing.split()
    for name in class_names.split():
        if name not in existing:
            existing.append(name)
    tag["class"] = existing


class TableStyler:
    """Applies StyleOptions to the tables matched by a selection policy."""

    def __init__(self, locator: Optional[TableLocator] = None):
        self.locator = locator or TableLocator()

    def style(self, html: str, options: StyleOptions, policy: Optional[SelectorPolicy] = None) -> str:
        """
        Style the located tables and return the whole document.

        Args:
            html: Document or fragment
            options: Style options; empty values leave things unchanged
            policy: Which tables to style (default: every table)

        Returns:
            Styled markup with the input's fragment/document shape
        """
        soup = parse_html(html)
        policy = policy or ALL_TABLES
        tables = self.locator.locate(soup, policy, multiple_allowed=True)

        for table in tables:
            self._style_table(table, options)

        logger.info(f"Styled {len(tables)} table(s)")
        return str(soup)

    def _style_table(self, table: Tag, options: StyleOptions) -> None:
        if options.table_class:
            add_class(table, options.table_class)
        merge_style(table, parse_style(options.table_style))
        merge_style(table, self._table_declarations(table, options))

        rows = self._own_rows(table)
        for row in rows:
            merge_style(row, parse_style(options.row_style))
            if options.row_text_align:
                merge_style(row, {"text-align": options.row_text_align})

            for cell in row.find_all(["td", "th"], recursive=False):
                merge_style(cell, parse_style(options.cell_style))
                if options.cell_text_align:
                    merge_style(cell, {"text-align": options.cell_text_align})
                self._style_cell(cell, options)

        if options.zebra_striping:
            for i, row in enumerate(self._body_rows(rows)):
                color = options.even_row_color if i % 2 == 0 else options.odd_row_color
                if color:
                    merge_style(row, {"background-color": color})

        caption = own_caption(table)
        if caption is not None:
            merge_style(caption, parse_style(options.caption_style))
            if options.caption_position in ("top", "bottom"):
                merge_style(caption, {"caption-side": options.caption_position})

    def _table_declarations(self, table: Tag, options: StyleOptions) -> Dict[str, str]:
        declarations: Dict[str, str] = {}
        if options.border_style:
            declarations["border-style"] = options.border_style
        if options.border_color:
            declarations["border-color"] = options.border_color
        if options.border_width is not None and options.border_width >= 0:
            table["border"] = str(options.border_width)
            declarations["border-width"] = f"{options.border_width}px"
        if options.border_radius:
            declarations["border-radius"] = options.border_radius
        if options.border_collapse:
            declarations["border-collapse"] = options.border_collapse
        if options.table_text_align:
            declarations["text-align"] = options.table_text_align
        if options.table_width:
            declarations["width"] = options.table_width
        return declarations

    def _style_cell(self, cell: Tag, options: StyleOptions) -> None:
        header = cell.name == "th"
        declarations: Dict[str, str] = {}

        align = options.header_align if header else options.body_align
        if align:
            declarations["text-align"] = align
        if not header and options.numeric_align and is_numeric(cell.get_text().strip()):
            declarations["text-align"] = options.numeric_align

        vertical = options.header_vertical_align if header else options.body_vertical_align
        if vertical:
            declarations["vertical-align"] = vertical

        wrap = options.header_wrap if header else options.body_wrap
        if wrap:
            declarations["white-space"] = WRAP_VALUES.get(wrap.lower(), wrap)

        merge_style(cell, declarations)

    @staticmethod
    def _own_rows(table: Tag) -> List[Tag]:
        return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]

    @staticmethod
    def _body_rows(rows: List[Tag]) -> List[Tag]:
        """Rows outside thead/tfoot that are not all-``th`` header rows."""
        body = []
        for row in rows:
            if row.parent is not None and row.parent.name in ("thead", "tfoot"):
                continue
            cells = row.find_all(["td", "th"], recursive=False)
            if cells and all(cell.name == "th" for cell in cells):
                continue
            body.append(row)
        return body
