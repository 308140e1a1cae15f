"""Data models for table conversion."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class FormatType(Enum):
    """Formats a conversion can read from or write to."""
    HTML = "html"
    CSV = "csv"
    JSON = "json"
    OBJECT = "object"

    @classmethod
    def parse(cls, value: Union[str, "FormatType"]) -> "FormatType":
        """Accept a FormatType or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        # The host platform historically called the native form "n8nObject"
        if text in ("n8nobject", "native", "nativeobject"):
            return cls.OBJECT
        return cls(text)


class TablePreset(Enum):
    """Named shorthands for common table selections."""
    ALL_TABLES = "all-tables"
    FIRST_TABLE = "first-table"
    LAST_TABLE = "last-table"
    TABLE_UNDER_HEADING = "table-under-heading"
    CUSTOM = "custom"
    TABLE_WITH_CAPTION = "table-with-caption"


class SelectorMode(Enum):
    """How the caller describes the table to select."""
    SIMPLE = "simple"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class TableData:
    """A table extracted from HTML or built from CSV/JSON data."""
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    caption: Optional[str] = None


@dataclass(frozen=True)
class StandardSelector:
    """Search ``table_selector`` inside elements matched by ``element_selector``.

    ``match_all`` marks the "all tables" preset: every container contributes
    its matches and replacement touches every match. ``take_last`` picks the
    container's last match instead of its first.
    """
    element_selector: str = "html"
    table_selector: str = "table"
    match_all: bool = False
    take_last: bool = False


@dataclass(frozen=True)
class UnderHeadingSelector:
    """The ``table_index``-th table (1-based) after a heading containing ``heading_text``."""
    heading_level: int = 1
    heading_text: str = ""
    table_index: int = 1

    @property
    def heading_selector(self) -> str:
        return f"h{self.heading_level}"


@dataclass(frozen=True)
class CaptionSelector:
    """Tables whose ``<caption>`` contains ``caption_text``."""
    caption_text: str = ""


SelectorPolicy = Union[StandardSelector, UnderHeadingSelector, CaptionSelector]


@dataclass
class ConversionOptions:
    """Options shared by every converter. Each converter reads only what it needs."""
    include_headers: bool = True
    pretty_print: bool = False
    multiple_tables: bool = False
    delimiter: str = ","
    sort_field: str = ""
    sort_order: str = "ascending"
    fields: str = ""  # comma-separated allowlist, quoted names allowed
    always_nest: bool = False


@dataclass
class StyleOptions:
    """Cosmetic options for the style operation. Empty values leave things unchanged."""
    table_class: str = ""
    table_style: str = ""
    row_style: str = ""
    cell_style: str = ""
    zebra_striping: bool = False
    even_row_color: str = ""
    odd_row_color: str = ""
    border_style: str = ""
    border_color: str = ""
    border_width: Optional[int] = None
    border_radius: str = ""
    border_collapse: str = ""
    table_text_align: str = ""
    row_text_align: str = ""
    cell_text_align: str = ""
    caption_style: str = ""
    caption_position: str = ""
    header_align: str = ""
    body_align: str = ""
    numeric_align: str = ""
    header_vertical_align: str = ""
    body_vertical_align: str = ""
    header_wrap: str = ""
    body_wrap: str = ""
    table_width: str = ""
