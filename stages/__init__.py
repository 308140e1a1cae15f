"""Pipeline stages."""

from .selector_resolver import resolve_from_params, resolve_selector, replaces_all
from .table_locator import TableLocator
from .table_extractor import TableExtractor
from .replacer import TableReplacer
from .styler import TableStyler
from .fetcher import fetch_html

__all__ = [
    "resolve_selector",
    "resolve_from_params",
    "replaces_all",
    "TableLocator",
    "TableExtractor",
    "TableReplacer",
    "TableStyler",
    "fetch_html",
]
