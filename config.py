"""Configuration management for table conversion."""

import os
import logging
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

from .models import ConversionOptions

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes")


@dataclass
class Config:
    """Configuration for conversions, replacement and styling."""

    # Conversion defaults
    csv_delimiter: str
    include_headers: bool
    pretty_print: bool
    multiple_tables: bool

    # Input guards
    max_html_bytes: int  # Documents above this size are rejected before parsing
    max_json_bytes: int
    max_nesting_depth: int  # Maximum tag / JSON nesting depth accepted

    # Extraction
    table_chunk_size: int  # Tables extracted per batch for large documents

    # Host output packaging
    wrap_output: bool
    output_field_name: str

    # Remote sources
    fetch_timeout: int

    # Logging
    log_level: str
    log_file: Optional[str]

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Helper to get optional env var with default
        def get_optional(key: str, default: str) -> str:
            return os.getenv(key, default)

        def get_flag(key: str, default: str) -> bool:
            return get_optional(key, default).strip().lower() in TRUE_VALUES

        # Helper for parsing and validating size/count settings
        def get_positive_int(key: str, default: str) -> int:
            """Parse and validate a positive integer setting."""
            val_str = os.getenv(key, default)
            try:
                val = int(val_str)
            except (ValueError, TypeError) as e:
                raise ValueError(
                    f"Invalid value for {key}: '{val_str}'. Must be a positive integer. Error: {e}"
                )
            if val < 1:
                raise ValueError(f"{key} must be at least 1, got {val}")
            return val

        delimiter = get_optional("CSV_DELIMITER", ",")
        if not delimiter:
            logger.warning("CSV_DELIMITER is empty, falling back to ','")
            delimiter = ","

        return cls(
            csv_delimiter=delimiter,
            include_headers=get_flag("INCLUDE_HEADERS", "true"),
            pretty_print=get_flag("PRETTY_PRINT", "false"),
            multiple_tables=get_flag("MULTIPLE_TABLES", "false"),

            max_html_bytes=get_positive_int("MAX_HTML_BYTES", str(10 * 1024 * 1024)),
            max_json_bytes=get_positive_int("MAX_JSON_BYTES", str(50 * 1024 * 1024)),
            max_nesting_depth=get_positive_int("MAX_NESTING_DEPTH", "100"),

            table_chunk_size=get_positive_int("TABLE_CHUNK_SIZE", "100"),

            wrap_output=get_flag("WRAP_OUTPUT", "true"),
            output_field_name=get_optional("OUTPUT_FIELD_NAME", "convertedData") or "convertedData",

            fetch_timeout=get_positive_int("FETCH_TIMEOUT", "10"),

            log_level=get_optional("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )

    def default_options(self) -> ConversionOptions:
        """Build ConversionOptions from the configured defaults."""
        return ConversionOptions(
            include_headers=self.include_headers,
            pretty_print=self.pretty_print,
            multiple_tables=self.multiple_tables,
            delimiter=self.csv_delimiter,
        )
