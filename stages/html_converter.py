"""HTML table rendering, parsing and minification."""

import html
import logging
import re
from typing import List

from bs4 import BeautifulSoup, Comment, NavigableString

from ..models import TableData

logger = logging.getLogger(__name__)

PARSER = "html.parser"

# Whitespace inside these elements is significant
PRESERVE_WHITESPACE = ["pre", "textarea"]

WHITESPACE_RUN = re.compile(r"\s+")


def parse_html(markup: str) -> BeautifulSoup:
    """Parse markup without adding html/head/body wrappers to fragments."""
    return BeautifulSoup(markup, PARSER)


def escape(text: str) -> str:
    return html.escape(text or "", quote=True)


def render_table(table: TableData, pretty: bool = False) -> str:
    """
    Render one table as HTML.

    Emits ``<table>``, an optional ``<caption>``, a ``<thead>`` when the
    table has headers and a ``<tbody>``. All text is escaped. ``pretty`` puts
    every element on its own line with two-space indentation.
    """
    indent = "\n  " if pretty else ""
    pad = "  " if pretty else ""
    parts = ["<table>"]

    if table.caption:
        parts.append(f"{indent}<caption>{escape(table.caption)}</caption>")

    if table.headers:
        parts.append(f"{indent}<thead>")
        parts.append(f"{indent}{pad}<tr>")
        for header in table.headers:
            parts.append(f"{indent}{pad}{pad}<th>{escape(header)}</th>")
        parts.append(f"{indent}{pad}</tr>")
        parts.append(f"{indent}</thead>")

    parts.append(f"{indent}<tbody>")
    for row in table.rows:
        parts.append(f"{indent}{pad}<tr>")
        for cell in row:
            parts.append(f"{indent}{pad}{pad}<td>{escape(cell)}</td>")
        parts.append(f"{indent}{pad}</tr>")
    parts.append(f"{indent}</tbody>")
    parts.append("\n</table>" if pretty else "</table>")

    return "".join(parts)


def render_tables(tables: List[TableData], pretty: bool = False) -> str:
    """Render several tables, separated by a blank line in pretty mode."""
    logger.debug(f"Rendering {len(tables)} table(s) as HTML")
    separator = "\n\n" if pretty else ""
    return separator.join(render_table(table, pretty) for table in tables)


def minify_html(markup: str) -> str:
    """
    Remove comments and collapse whitespace between tags.

    Whitespace-only text nodes are dropped and other text has its whitespace
    runs collapsed, except inside <pre> and <textarea>.
    """
    soup = parse_html(markup)

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for text in soup.find_all(string=True):
        # Comments, doctypes, script and style bodies are NavigableString subclasses
        if type(text) is not NavigableString:
            continue
        if text.find_parent(PRESERVE_WHITESPACE) is not None:
            continue
        if not text.strip():
            text.extract()
            continue
        collapsed = WHITESPACE_RUN.sub(" ", str(text))
        if collapsed != str(text):
            text.replace_with(NavigableString(collapsed))

    return str(soup)
