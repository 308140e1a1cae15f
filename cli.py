#!/usr/bin/env python3
"""Command-line interface for table conversion, replacement and styling."""

import sys
import logging
import argparse
from dataclasses import fields
from typing import Optional

from .config import Config
from .errors import TableConverterError
from .models import ConversionOptions, FormatType, SelectorMode, StyleOptions, TablePreset
from .pipeline import TableConverter, parse_format
from .stages.fetcher import fetch_html
from .stages.json_converter import dumps, loads
from .stages.selector_resolver import resolve_selector


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging. Output goes to stderr so stdout carries only results."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def add_source_arguments(parser: argparse.ArgumentParser):
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input", "-i",
        type=str,
        default=None,
        help="Input file (default: read from stdin)",
    )
    source.add_argument(
        "--url",
        type=str,
        default=None,
        help="Fetch the input HTML from this URL",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the result to this file instead of stdout",
    )


def add_selector_arguments(parser: argparse.ArgumentParser):
    group = parser.add_argument_group("table selection")
    group.add_argument(
        "--mode",
        default=SelectorMode.SIMPLE.value,
        choices=[m.value for m in SelectorMode],
        help="Use a preset (simple) or raw CSS selectors (advanced)",
    )
    group.add_argument(
        "--preset",
        default=TablePreset.ALL_TABLES.value,
        choices=[p.value for p in TablePreset],
        help="Table preset in simple mode",
    )
    group.add_argument("--table-selector", default="", help="CSS selector for tables")
    group.add_argument("--element-selector", default="", help="CSS selector for containers (advanced mode)")
    group.add_argument("--heading-level", type=int, default=1, help="Heading level for table-under-heading")
    group.add_argument("--heading-text", default="", help="Heading text to match (case-insensitive)")
    group.add_argument("--table-index", type=int, default=1, help="1-based table index under the heading")
    group.add_argument("--caption-text", default="", help="Caption text to match (case-insensitive)")


def add_style_arguments(parser: argparse.ArgumentParser):
    group = parser.add_argument_group("style options")
    for option in fields(StyleOptions):
        flag = "--" + option.name.replace("_", "-")
        if option.type in (bool, "bool"):
            group.add_argument(flag, action="store_true")
        elif option.name == "border_width":
            group.add_argument(flag, type=int, default=None)
        else:
            group.add_argument(flag, default="")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="tableconv - Convert, replace and style tables across HTML, CSV and JSON"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to .env configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL from config)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert = subparsers.add_parser("convert", help="Convert between html, csv, json and object")
    convert.add_argument("--from", dest="source_format", required=True,
                         choices=[f.value for f in FormatType], help="Source format")
    convert.add_argument("--to", dest="target_format", required=True,
                         choices=[f.value for f in FormatType], help="Target format")
    convert.add_argument("--delimiter", default=None, help="CSV delimiter (default: CSV_DELIMITER)")
    convert.add_argument("--no-headers", action="store_true", help="Do not treat the first row as headers")
    convert.add_argument("--pretty", action="store_true", help="Pretty-print JSON and HTML output")
    convert.add_argument("--multiple", action="store_true", help="Convert every matching table")
    convert.add_argument("--always-nest", action="store_true",
                         help="Always wrap table output as a list of {caption, data}")
    convert.add_argument("--sort-field", default="", help="Sort records by this field")
    convert.add_argument("--sort-order", default="ascending", choices=["ascending", "descending"])
    convert.add_argument("--fields", default="", help="Comma-separated fields to keep, in order")
    add_source_arguments(convert)
    add_selector_arguments(convert)

    replace = subparsers.add_parser("replace", help="Replace a table inside an HTML document")
    replace.add_argument("--replacement", "-r", required=True, help="File holding the replacement content")
    replace.add_argument("--replacement-format", default=FormatType.HTML.value,
                         choices=[FormatType.HTML.value, FormatType.CSV.value, FormatType.JSON.value])
    replace.add_argument("--pretty", action="store_true", help="Pretty-print converted replacement tables")
    add_source_arguments(replace)
    add_selector_arguments(replace)

    style = subparsers.add_parser("style", help="Apply styles to tables inside an HTML document")
    add_source_arguments(style)
    add_selector_arguments(style)
    add_style_arguments(style)

    return parser


def read_source(args, config: Config) -> str:
    if args.url:
        return fetch_html(args.url, timeout=config.fetch_timeout)
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def write_result(result: str, output: Optional[str]):
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(result)
    else:
        sys.stdout.write(result)
        if not result.endswith("\n"):
            sys.stdout.write("\n")


def policy_from_args(args):
    return resolve_selector(
        args.mode,
        args.preset,
        table_selector=args.table_selector,
        element_selector=args.element_selector,
        heading_level=args.heading_level,
        heading_text=args.heading_text,
        table_index=args.table_index,
        caption_text=args.caption_text,
    )


def run_command(args, config: Config) -> str:
    converter = TableConverter(config)
    policy = policy_from_args(args)
    source = read_source(args, config)

    if args.command == "convert":
        options = ConversionOptions(
            include_headers=not args.no_headers and config.include_headers,
            pretty_print=args.pretty or config.pretty_print,
            multiple_tables=args.multiple or config.multiple_tables,
            delimiter=args.delimiter or config.csv_delimiter,
            sort_field=args.sort_field,
            sort_order=args.sort_order,
            fields=args.fields,
            always_nest=args.always_nest,
        )
        source_format = parse_format(args.source_format)
        data = native_or_text(source, source_format)
        result = converter.convert(data, source_format, args.target_format, options, policy)
        if not isinstance(result, str):
            result = dumps(result, pretty=True)
        return result

    if args.command == "replace":
        with open(args.replacement, "r", encoding="utf-8") as f:
            replacement = f.read()
        options = ConversionOptions(pretty_print=args.pretty, delimiter=config.csv_delimiter)
        return converter.replace_table(source, replacement, policy, args.replacement_format, options)

    style_options = StyleOptions(**{option.name: getattr(args, option.name) for option in fields(StyleOptions)})
    return converter.style_table(source, style_options, policy)


def native_or_text(text: str, source_format: FormatType):
    """Object input on the command line arrives as JSON text."""
    if source_format is FormatType.OBJECT:
        return loads(text)
    return text


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.from_env(args.config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(args.log_level or config.log_level, config.log_file)
    logger = logging.getLogger(__name__)

    try:
        logger.info(f"Running '{args.command}'")
        result = run_command(args, config)
        write_result(result, args.output)
        return 0

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 1

    except TableConverterError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"\nError: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
