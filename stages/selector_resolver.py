"""Selector resolution - turns presets and raw selectors into a selection policy."""

import logging
from typing import Any, Mapping, Optional, Union

from ..models import (
    CaptionSelector,
    SelectorMode,
    SelectorPolicy,
    StandardSelector,
    TablePreset,
    UnderHeadingSelector,
)

logger = logging.getLogger(__name__)

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 999

DEFAULT_POLICY = StandardSelector(element_selector="html", table_selector="table")


def _as_int(value: Any) -> Optional[int]:
    """Integer value of ``value`` or None when it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        return int(value.strip())
    return None


def clamp_heading_level(value: Any) -> int:
    """Heading level in [1, 999]; anything else silently becomes 1."""
    level = _as_int(value)
    if level is None or level < MIN_HEADING_LEVEL or level > MAX_HEADING_LEVEL:
        return MIN_HEADING_LEVEL
    return level


def clamp_table_index(value: Any) -> int:
    index = _as_int(value)
    if index is None or index < 1:
        return 1
    return index


def _preset_from(value: Any) -> Optional[TablePreset]:
    if isinstance(value, TablePreset):
        return value
    try:
        return TablePreset(str(value or "").strip().lower())
    except ValueError:
        return None


def resolve_selector(
    mode: Union[str, SelectorMode] = SelectorMode.SIMPLE,
    preset: Union[str, TablePreset, None] = TablePreset.ALL_TABLES,
    *,
    table_selector: str = "",
    element_selector: str = "",
    heading_level: Any = 1,
    heading_text: str = "",
    table_index: Any = 1,
    caption_text: str = "",
) -> SelectorPolicy:
    """
    Resolve user-facing selection input into a SelectorPolicy.

    Pure and total: every preset maps to exactly one policy and unknown
    presets fall back to every ``table`` under ``html``.

    Args:
        mode: 'simple' (use ``preset``) or 'advanced' (use the raw selectors)
        preset: Preset name, used in simple mode
        table_selector: CSS selector for tables (advanced mode, custom preset)
        element_selector: CSS selector for containers (advanced mode)
        heading_level: Heading rank for the table-under-heading preset
        heading_text: Heading text to match (case-insensitive substring)
        table_index: 1-based table position under the heading
        caption_text: Caption text to match (case-insensitive substring)

    Returns:
        The resolved SelectorPolicy
    """
    mode_value = mode.value if isinstance(mode, SelectorMode) else str(mode or "").strip().lower()

    if mode_value == SelectorMode.ADVANCED.value:
        return StandardSelector(
            element_selector=(element_selector or "").strip(),
            table_selector=(table_selector or "").strip() or "table",
        )

    resolved = _preset_from(preset if preset is not None else TablePreset.ALL_TABLES)

    if resolved is TablePreset.ALL_TABLES:
        return StandardSelector("html", "table", match_all=True)
    if resolved is TablePreset.FIRST_TABLE:
        return StandardSelector("html", "table:first-of-type")
    if resolved is TablePreset.LAST_TABLE:
        return StandardSelector("html", "table:last-of-type", take_last=True)
    if resolved is TablePreset.CUSTOM:
        return StandardSelector("html", (table_selector or "").strip() or "table")
    if resolved is TablePreset.TABLE_UNDER_HEADING:
        return UnderHeadingSelector(
            heading_level=clamp_heading_level(heading_level),
            heading_text=(heading_text or "").strip(),
            table_index=clamp_table_index(table_index),
        )
    if resolved is TablePreset.TABLE_WITH_CAPTION:
        return CaptionSelector(caption_text=(caption_text or "").strip())

    logger.debug(f"Unknown table preset {preset!r}, using default selectors")
    return DEFAULT_POLICY


def resolve_from_params(params: Mapping[str, Any]) -> SelectorPolicy:
    """Resolve a policy from a flat mapping of parameter names to values."""
    return resolve_selector(
        params.get("selector_mode", SelectorMode.SIMPLE.value),
        params.get("table_preset", TablePreset.ALL_TABLES.value),
        table_selector=params.get("table_selector", "") or "",
        element_selector=params.get("element_selector", "") or "",
        heading_level=params.get("heading_level", 1),
        heading_text=params.get("heading_text", "") or "",
        table_index=params.get("table_index", 1),
        caption_text=params.get("caption_text", "") or "",
    )


def replaces_all(policy: SelectorPolicy) -> bool:
    """True when every matched table should be replaced, not just one."""
    return isinstance(policy, StandardSelector) and policy.match_all


def describe(policy: SelectorPolicy) -> str:
    """Short human-readable description of a policy, for logs and errors."""
    if isinstance(policy, UnderHeadingSelector):
        text = policy.heading_text or "any text"
        return f'table #{policy.table_index} under {policy.heading_selector} containing "{text}"'
    if isinstance(policy, CaptionSelector):
        return f'table with caption containing "{policy.caption_text or "any text"}"'
    container = policy.element_selector or "document"
    return f'"{policy.table_selector}" within "{container}"'
