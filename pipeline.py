"""Conversion engine - orchestrates selection, extraction and format conversion."""

import logging
from typing import Any, List, Optional, Union

from .config import Config
from .errors import ConversionError, TableConverterError, ValidationError
from .models import (
    ConversionOptions,
    FormatType,
    SelectorPolicy,
    StyleOptions,
    TableData,
)
from .stages import (
    TableExtractor,
    TableLocator,
    TableReplacer,
    TableStyler,
    resolve_selector,
)
from .stages.csv_converter import parse_csv, parse_table, tables_to_csv
from .stages.data_manipulation import find_key, manipulate, parse_field_list
from .stages.html_converter import minify_html, parse_html, render_tables
from .stages.input_guard import validate_html_input, validate_input
from .stages.json_converter import dumps, loads, records_to_table, tables_to_payload

logger = logging.getLogger(__name__)

Format = Union[str, FormatType]


def parse_format(value: Format) -> FormatType:
    """FormatType for ``value``, raising ValidationError for unknown names."""
    try:
        return FormatType.parse(value)
    except ValueError as e:
        raise ValidationError(f"Unsupported format: {value!r}") from e


def is_table_payload(value: Any) -> bool:
    """True for the ``{"caption", "data"}`` shape produced for captioned tables."""
    return (
        isinstance(value, dict)
        and "data" in value
        and isinstance(value["data"], list)
        and set(value) <= {"caption", "data"}
    )


def is_payload_list(value: Any) -> bool:
    """True for the list of ``{caption?, data}`` produced for several tables."""
    return isinstance(value, list) and bool(value) and all(is_table_payload(item) for item in value)


class TableConverter:
    """Main conversion engine."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize the engine and its stages."""
        self.config = config or Config.from_env()

        self.locator = TableLocator()
        self.replacer = TableReplacer(locator=self.locator)
        self.styler = TableStyler(locator=self.locator)

        logger.debug("Table converter initialized")

    def convert(
        self,
        data: Any,
        source_format: Format,
        target_format: Format,
        options: Optional[ConversionOptions] = None,
        policy: Optional[SelectorPolicy] = None,
    ) -> Any:
        """
        Convert ``data`` between formats.

        Args:
            data: Text for html/csv/json sources, a list or dict for object sources
            source_format: html, csv, json or object
            target_format: html, csv, json or object
            options: Conversion options (default: from config)
            policy: Table selection for HTML sources (default: all tables)

        Returns:
            Text for html/csv/json targets, Python values for object targets

        Raises:
            ValidationError: Bad input or format name
            NotFoundError: No table matched the policy
            ConversionError: No conversion applies, or the conversion failed
        """
        source = parse_format(source_format)
        target = parse_format(target_format)
        options = options or self.config.default_options()
        policy = policy or resolve_selector()

        logger.info(f"Converting {source.value} to {target.value}")

        try:
            if source is FormatType.HTML:
                validate_html_input(data, self.config.max_html_bytes, self.config.max_nesting_depth)
                return self._convert_html(data, target, options, policy)

            # JSON is checked while parsing, against the configured limits
            if source is not FormatType.JSON:
                validate_input(data, source, options.delimiter)

            if source is target and source in (FormatType.CSV, FormatType.OBJECT):
                return data

            if source is FormatType.CSV and target is FormatType.HTML and not self._manipulates(options):
                table = parse_table(data, options.delimiter, options.include_headers)
                return render_tables([table], options.pretty_print)

            value = self._manipulate(self._load(data, source, options), options)
            return self._render_value(value, target, options)

        except TableConverterError as e:
            if e.source is None:
                e.source, e.target = source.value, target.value
            raise
        except Exception as e:
            logger.debug(f"Unexpected failure converting {source.value} to {target.value}", exc_info=True)
            raise ConversionError(
                f"Conversion error ({source.value} to {target.value}): {e}",
                source=source.value,
                target=target.value,
            ) from e

    def extract_tables(
        self,
        html: str,
        options: Optional[ConversionOptions] = None,
        policy: Optional[SelectorPolicy] = None,
    ) -> List[TableData]:
        """Locate and extract tables from an HTML document."""
        options = options or self.config.default_options()
        policy = policy or resolve_selector()

        soup = parse_html(html)
        nodes = self.locator.locate(soup, policy, multiple_allowed=options.multiple_tables)
        extractor = TableExtractor(
            include_headers=options.include_headers,
            chunk_size=self.config.table_chunk_size,
        )
        tables = extractor.extract_all(nodes)
        logger.info(f"Extracted {len(tables)} table(s)")
        return [self._manipulate_table(table, options) for table in tables]

    def replace_table(
        self,
        source_html: str,
        replacement: Any,
        policy: Optional[SelectorPolicy] = None,
        replacement_format: Format = FormatType.HTML,
        options: Optional[ConversionOptions] = None,
    ) -> str:
        """
        Replace located table(s) in ``source_html``.

        ``replacement`` may be HTML markup, minified unless pretty printing is
        on, or CSV/JSON/native data which is first converted to an HTML table
        with headers.
        """
        validate_html_input(source_html, self.config.max_html_bytes, self.config.max_nesting_depth)
        fmt = parse_format(replacement_format)
        policy = policy or resolve_selector()

        base = options or self.config.default_options()
        if fmt is FormatType.HTML:
            if not isinstance(replacement, str) or not replacement.strip():
                raise ValidationError("Replacement HTML must be a non-empty string", source=fmt.value)
            replacement_html = replacement if base.pretty_print else minify_html(replacement)
        else:
            replacement_options = ConversionOptions(
                include_headers=True,
                pretty_print=base.pretty_print,
                delimiter=base.delimiter,
            )
            replacement_html = self.convert(replacement, fmt, FormatType.HTML, replacement_options)

        return self.replacer.replace(source_html, replacement_html, policy)

    def style_table(
        self,
        html: str,
        style_options: Optional[StyleOptions] = None,
        policy: Optional[SelectorPolicy] = None,
    ) -> str:
        """Apply ``style_options`` to the located tables (every table by default)."""
        validate_html_input(html, self.config.max_html_bytes, self.config.max_nesting_depth)
        return self.styler.style(html, style_options or StyleOptions(), policy)

    def _convert_html(self, html: str, target: FormatType, options: ConversionOptions, policy: SelectorPolicy) -> Any:
        tables = self.extract_tables(html, options, policy)

        if target is FormatType.HTML:
            return render_tables(tables, options.pretty_print)
        if target is FormatType.CSV:
            return tables_to_csv(tables, options.delimiter)

        payload = tables_to_payload(tables, options)
        if target is FormatType.JSON:
            return dumps(payload, options.pretty_print)
        return payload

    def _load(self, data: Any, source: FormatType, options: ConversionOptions) -> Any:
        if source is FormatType.CSV:
            return parse_csv(data, options.delimiter, options.include_headers)
        if source is FormatType.JSON:
            if not isinstance(data, str):
                raise ValidationError("Input data must be a string for JSON input", source=source.value)
            value = loads(data, self.config.max_json_bytes, self.config.max_nesting_depth)
            if not isinstance(value, (dict, list)):
                raise ValidationError("JSON input must be an object or array", source=source.value)
            return value
        # A bare object is a single row
        if isinstance(data, dict) and not is_table_payload(data):
            return [data]
        return data

    def _render_value(self, value: Any, target: FormatType, options: ConversionOptions) -> Any:
        if target is FormatType.OBJECT:
            return value
        if target is FormatType.JSON:
            return dumps(value, options.pretty_print)

        tables = self._value_to_tables(value, options)
        if target is FormatType.CSV:
            return tables_to_csv(tables, options.delimiter)
        if target is FormatType.HTML:
            return render_tables(tables, options.pretty_print)

        raise ConversionError(f"Unsupported target format: {target.value}")

    def _value_to_tables(self, value: Any, options: ConversionOptions) -> List[TableData]:
        if is_table_payload(value):
            return [self._records_table(value["data"], options, value.get("caption"))]
        if is_payload_list(value):
            return [self._records_table(item["data"], options, item.get("caption")) for item in value]
        return [self._records_table(value, options)]

    @staticmethod
    def _records_table(records: Any, options: ConversionOptions, caption: Optional[str] = None) -> TableData:
        table = records_to_table(records, options.include_headers)
        headers = table.headers if options.include_headers else []
        return TableData(headers=headers, rows=table.rows, caption=caption or None)

    @staticmethod
    def _manipulates(options: ConversionOptions) -> bool:
        return bool((options.sort_field or "").strip() or (options.fields or "").strip())

    def _manipulate(self, value: Any, options: ConversionOptions) -> Any:
        if not self._manipulates(options):
            return value
        if is_table_payload(value):
            return dict(value, data=manipulate(value["data"], options))
        if is_payload_list(value):
            return [dict(item, data=manipulate(item["data"], options)) for item in value]
        return manipulate(value, options)

    def _manipulate_table(self, table: TableData, options: ConversionOptions) -> TableData:
        if not table.headers or not table.rows or not self._manipulates(options):
            return table
        records = manipulate(
            [{h: row[i] for i, h in enumerate(table.headers) if i < len(row)} for row in table.rows],
            options,
        )
        headers = self._kept_headers(table.headers, options)

        rows = []
        for record in records:
            cells = [record.get(header) for header in headers]
            # Short rows stay short
            while cells and cells[-1] is None:
                cells.pop()
            rows.append(["" if cell is None else cell for cell in cells])
        return TableData(headers=headers, rows=rows, caption=table.caption)

    @staticmethod
    def _kept_headers(headers: List[str], options: ConversionOptions) -> List[str]:
        """Table headers left after field filtering, in the requested order."""
        requested = parse_field_list(options.fields)
        if not requested:
            return list(headers)
        lookup = dict.fromkeys(headers)
        kept: List[str] = []
        for name in requested:
            key = find_key(lookup, name)
            if key is not None and key not in kept:
                kept.append(key)
        return kept

