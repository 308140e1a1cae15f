"""Host platform boundary - runs operations over a batch of workflow items."""

import json
import logging
from dataclasses import fields
from typing import Any, Callable, Dict, List, Optional

from .errors import ValidationError
from .models import ConversionOptions, FormatType, StyleOptions
from .pipeline import TableConverter, parse_format
from .stages.selector_resolver import resolve_from_params

logger = logging.getLogger(__name__)

# get_parameter(name, item_index, default) -> value
ParameterGetter = Callable[[str, int, Any], Any]

SELECTOR_PARAMETERS = (
    "selector_mode",
    "table_preset",
    "table_selector",
    "element_selector",
    "heading_level",
    "heading_text",
    "table_index",
    "caption_text",
)

OPERATIONS = ("convert", "replace", "style")


def as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


class HostAdapter:
    """
    Adapts the conversion engine to a workflow host.

    The host supplies its input items (plain dicts) and a parameter getter.
    Every output record has the shape ``{"data": payload}``.
    """

    def __init__(self, converter: Optional[TableConverter] = None):
        self.converter = converter or TableConverter()
        self.config = self.converter.config

    def execute(self, items: List[Dict[str, Any]], get_parameter: ParameterGetter) -> List[Dict[str, Any]]:
        """
        Run the configured operation over ``items``.

        Args:
            items: Input items from the host
            get_parameter: Callable returning a parameter value for an item index

        Returns:
            Output records in order

        Raises:
            ValidationError: Unknown operation or bad parameters
            TableConverterError: Any failure from the engine
        """
        items = items or [{}]
        operation = str(get_parameter("operation", 0, "convert") or "convert").strip().lower()
        logger.info(f"Executing '{operation}' over {len(items)} item(s)")

        if operation == "replace":
            return self._run_replace(items, get_parameter)
        if operation == "style":
            return self._run_style(items, get_parameter)
        if operation == "convert":
            return self._run_convert(items, get_parameter)

        raise ValidationError(f"Unknown operation: {operation!r}. Expected one of {', '.join(OPERATIONS)}")

    # --- Operations ---

    def _run_convert(self, items, get_parameter) -> List[Dict[str, Any]]:
        source = parse_format(get_parameter("source_format", 0, "html"))
        target = parse_format(get_parameter("target_format", 0, "json"))

        if source is FormatType.OBJECT and as_flag(get_parameter("process_all_items_at_once", 0, False)):
            merged = []
            for index, item in enumerate(items):
                value = self._object_input(item, get_parameter("input_data", index, ""))
                if isinstance(value, list):
                    merged.extend(element for element in value if isinstance(element, dict))
                else:
                    merged.append(value)
            logger.debug(f"Merged {len(merged)} object(s) from {len(items)} item(s)")
            result = self.converter.convert(
                merged, source, target, self._conversion_options(get_parameter, 0)
            )
            return self._package(result, target, get_parameter, 0)

        output: List[Dict[str, Any]] = []
        for index, item in enumerate(items):
            raw = get_parameter("input_data", index, "")
            data = self._object_input(item, raw) if source is FormatType.OBJECT else raw
            policy = resolve_from_params(self._selector_params(get_parameter, index))
            result = self.converter.convert(
                data, source, target, self._conversion_options(get_parameter, index), policy
            )
            output.extend(self._package(result, target, get_parameter, index))
        return output

    def _run_replace(self, items, get_parameter) -> List[Dict[str, Any]]:
        output: List[Dict[str, Any]] = []
        for index, _ in enumerate(items):
            result = self.converter.replace_table(
                get_parameter("source_html", index, ""),
                get_parameter("replacement_content", index, ""),
                resolve_from_params(self._selector_params(get_parameter, index)),
                replacement_format=get_parameter("replacement_format", index, "html") or "html",
                options=self._conversion_options(get_parameter, index),
            )
            output.extend(self._package(result, FormatType.HTML, get_parameter, index))
        return output

    def _run_style(self, items, get_parameter) -> List[Dict[str, Any]]:
        output: List[Dict[str, Any]] = []
        for index, _ in enumerate(items):
            result = self.converter.style_table(
                get_parameter("html_input", index, ""),
                self._style_options(get_parameter, index),
                resolve_from_params(self._selector_params(get_parameter, index)),
            )
            output.extend(self._package(result, FormatType.HTML, get_parameter, index))
        return output

    # --- Parameters ---

    def _conversion_options(self, get_parameter, index: int) -> ConversionOptions:
        defaults = self.config.default_options()
        return ConversionOptions(
            include_headers=as_flag(get_parameter("include_headers", index, defaults.include_headers)),
            pretty_print=as_flag(get_parameter("pretty_print", index, defaults.pretty_print)),
            multiple_tables=as_flag(get_parameter("multiple_items", index, defaults.multiple_tables)),
            delimiter=get_parameter("csv_delimiter", index, defaults.delimiter) or defaults.delimiter,
            sort_field=get_parameter("sort_field", index, "") or "",
            sort_order=get_parameter("sort_order", index, "ascending") or "ascending",
            fields=get_parameter("fields", index, "") or "",
            always_nest=as_flag(get_parameter("always_nest", index, False)),
        )

    def _style_options(self, get_parameter, index: int) -> StyleOptions:
        values = {}
        for option in fields(StyleOptions):
            values[option.name] = get_parameter(option.name, index, option.default)

        values["zebra_striping"] = as_flag(values["zebra_striping"])
        width = values["border_width"]
        if width in (None, ""):
            values["border_width"] = None
        else:
            try:
                values["border_width"] = int(width)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"border_width must be an integer, got {width!r}") from e
        return StyleOptions(**values)

    @staticmethod
    def _selector_params(get_parameter, index: int) -> Dict[str, Any]:
        params = {}
        for name in SELECTOR_PARAMETERS:
            value = get_parameter(name, index, None)
            if value is not None:
                params[name] = value
        return params

    def _object_input(self, item: Dict[str, Any], raw: Any) -> Any:
        """Native data from the ``input_data`` parameter, or from the item itself when it is empty."""
        if isinstance(raw, str) and raw.strip():
            try:
                return json.loads(raw)
            except json.JSONDecodeError as e:
                raise ValidationError(f"input_data is not valid JSON: {e}", source=FormatType.OBJECT.value) from e
        if raw not in (None, ""):
            return raw

        field_name = self.config.output_field_name
        if field_name in item:
            return item[field_name]
        return {key: value for key, value in item.items() if not str(key).startswith("__")}

    # --- Output ---

    def _package(self, result: Any, target: FormatType, get_parameter, index: int) -> List[Dict[str, Any]]:
        wrap = as_flag(get_parameter("wrap_output", index, self.config.wrap_output))
        field_name = get_parameter("output_field_name", index, self.config.output_field_name) or self.config.output_field_name

        if wrap:
            return [{"data": {field_name: result}}]
        if target is FormatType.OBJECT and isinstance(result, list):
            return [{"data": element} for element in result]
        return [{"data": result}]
