"""Error types raised by the conversion, replacement and styling operations."""

from typing import List, Optional


class TableConverterError(Exception):
    """Base class for every error raised by tableconv.

    Carries the source/target format of the operation that failed so callers
    can report which leg of the conversion broke.
    """

    def __init__(self, message: str, source: Optional[str] = None, target: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.target = target


class ValidationError(TableConverterError):
    """Input is malformed, missing, oversized or uses invalid selector syntax."""


class ConversionError(TableConverterError):
    """Input is well-formed but no conversion branch applies to it."""


class NotFoundError(ConversionError):
    """No table matched the selection policy."""

    def __init__(
        self,
        message: str,
        selector: str = "",
        suggestions: Optional[List[str]] = None,
        source: Optional[str] = None,
        target: Optional[str] = None,
    ):
        self.selector = selector
        self.suggestions = list(suggestions or [])
        if self.suggestions:
            message = message + "\nSuggestions:\n" + "\n".join(f"- {s}" for s in self.suggestions)
        super().__init__(message, source=source, target=target)
