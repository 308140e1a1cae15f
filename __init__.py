"""tableconv - convert, locate, replace and style tables across HTML, CSV and JSON."""

from .config import Config
from .errors import ConversionError, NotFoundError, TableConverterError, ValidationError
from .host import HostAdapter
from .models import (
    CaptionSelector,
    ConversionOptions,
    FormatType,
    SelectorMode,
    StandardSelector,
    StyleOptions,
    TableData,
    TablePreset,
    UnderHeadingSelector,
)
from .pipeline import TableConverter
from .stages.selector_resolver import resolve_selector

__all__ = [
    "Config",
    "TableConverter",
    "HostAdapter",
    "resolve_selector",
    "FormatType",
    "TablePreset",
    "SelectorMode",
    "StandardSelector",
    "UnderHeadingSelector",
    "CaptionSelector",
    "TableData",
    "ConversionOptions",
    "StyleOptions",
    "TableConverterError",
    "ValidationError",
    "ConversionError",
    "NotFoundError",
]
