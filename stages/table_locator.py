"""Table location stage - finds table nodes in a parsed HTML document."""

import logging
import re
from typing import List, Optional, Set

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from ..errors import NotFoundError, ValidationError
from ..models import CaptionSelector, SelectorPolicy, StandardSelector, UnderHeadingSelector

logger = logging.getLogger(__name__)

# Container selectors that mean "the whole document". Fragments parsed with
# html.parser have no <html> element to match.
ROOT_SELECTORS = ("", "html", ":root")

HEADING_PATTERN = re.compile(r"^h(\d+)$")

SYNTAX_HELP = (
    "\nCommon issues include:"
    "\n- Incorrect CSS syntax (missing quotes, brackets, etc.)"
    "\n- jQuery-only selectors such as :eq() or :first"
    "\n- Unsupported pseudo-selectors"
    "\nTry simple mode with a preset instead."
)

SELECTOR_SUGGESTIONS = [
    "Check that your HTML actually contains <table> elements",
    'Try a more general selector such as "table" or "div table"',
    "Try another preset (first table, last table, all tables) or switch to advanced mode",
    "Use browser developer tools to identify the correct selector",
]


def normalize_text(node: Tag) -> str:
    """Node text with whitespace runs collapsed."""
    return " ".join(node.get_text().split())


def heading_rank(node: Tag) -> Optional[int]:
    """Rank of an ``h<N>`` element, or None for anything else."""
    match = HEADING_PATTERN.match(node.name or "")
    return int(match.group(1)) if match else None


def own_caption(table: Tag) -> Optional[Tag]:
    """First <caption> belonging to ``table`` itself, not to a nested table."""
    for caption in table.find_all("caption"):
        if caption.find_parent("table") is table:
            return caption
    return None


class TableLocator:
    """
    Locates table nodes in a parsed document according to a SelectorPolicy.

    Results are always in document order. An empty result is never returned:
    the locator raises NotFoundError with the attempted selector and
    troubleshooting suggestions instead.
    """

    def locate(self, soup: BeautifulSoup, policy: SelectorPolicy, multiple_allowed: bool = False) -> List[Tag]:
        """
        Locate table nodes.

        Args:
            soup: Parsed document
            policy: Selection policy
            multiple_allowed: Return every match instead of a single table

        Returns:
            Non-empty list of matched nodes in document order

        Raises:
            NotFoundError: Nothing matched
            ValidationError: A CSS selector could not be parsed
        """
        if isinstance(policy, UnderHeadingSelector):
            tables = self._locate_under_heading(soup, policy)
        elif isinstance(policy, CaptionSelector):
            tables = self._locate_with_caption(soup, policy, multiple_allowed)
        else:
            tables = self._locate_standard(soup, policy, multiple_allowed)

        logger.debug(f"Located {len(tables)} table(s) using {type(policy).__name__}")
        return tables

    def _locate_standard(self, soup: BeautifulSoup, policy: StandardSelector, multiple_allowed: bool) -> List[Tag]:
        element_selector = (policy.element_selector or "").strip()
        table_selector = (policy.table_selector or "").strip() or "table"
        collect_all = multiple_allowed or policy.match_all

        if element_selector in ROOT_SELECTORS:
            containers = [soup]
        else:
            try:
                containers = soup.select(element_selector)
            except SelectorSyntaxError as e:
                raise ValidationError(
                    f'Invalid element selector syntax: "{element_selector}" ({e}).{SYNTAX_HELP}'
                ) from e
            if not containers:
                raise NotFoundError(
                    f'No elements found matching the selector: "{element_selector}".',
                    selector=element_selector,
                    suggestions=[
                        'Try a more general container selector such as "html" or "body"',
                        "Leave the element selector empty to search the whole document",
                    ],
                )

        found: List[Tag] = []
        seen: Set[int] = set()
        for container in containers:
            try:
                matches = container.select(table_selector)
            except SelectorSyntaxError as e:
                raise ValidationError(
                    f'Invalid table selector syntax: "{table_selector}" ({e}).{SYNTAX_HELP}'
                ) from e

            if not matches:
                continue

            if not collect_all:
                return [matches[-1] if policy.take_last else matches[0]]

            # Nested containers reach the same table more than once
            for match in matches:
                if id(match) not in seen:
                    seen.add(id(match))
                    found.append(match)

        if not found:
            within = f' within elements matching "{element_selector}"' if element_selector else ""
            raise NotFoundError(
                f'No tables found matching the selector: "{table_selector}"{within}.',
                selector=table_selector,
                suggestions=SELECTOR_SUGGESTIONS,
            )
        return found

    def _locate_under_heading(self, soup: BeautifulSoup, policy: UnderHeadingSelector) -> List[Tag]:
        needle = policy.heading_text.lower()
        heading_selector = policy.heading_selector

        for heading in soup.select(heading_selector):
            if needle and needle not in normalize_text(heading).lower():
                continue

            tables = self._tables_after_heading(heading)
            logger.debug(f"Heading '{normalize_text(heading)[:60]}' has {len(tables)} table(s) in its section")
            if not tables:
                continue

            if policy.table_index <= len(tables):
                return [tables[policy.table_index - 1]]

            logger.warning(
                f"Table index {policy.table_index} is out of range ({len(tables)} table(s) under "
                f"{heading_selector}); using the first table"
            )
            return [tables[0]]

        raise NotFoundError(
            f'No tables found after heading {heading_selector} containing "{policy.heading_text or "any text"}".',
            selector=heading_selector,
            suggestions=[
                "Check the heading level and text against your HTML structure",
                "Leave the heading text empty to match any heading of that level",
                "Try another preset or switch to advanced mode",
            ],
        )

    def _tables_after_heading(self, heading: Tag) -> List[Tag]:
        """
        Collect tables following ``heading`` in document order.

        The walk stops at the next heading of equal or higher rank. Tables
        nested inside an already collected table belong to it and are skipped.
        """
        anchor_rank = heading_rank(heading) or 1
        tables: List[Tag] = []
        collected: Set[int] = set()

        for node in heading.next_elements:
            if not isinstance(node, Tag):
                continue
            rank = heading_rank(node)
            if rank is not None and rank <= anchor_rank and not any(p is heading for p in node.parents):
                break
            if node.name != "table":
                continue
            if any(id(parent) in collected for parent in node.parents):
                continue
            collected.add(id(node))
            tables.append(node)

        return tables

    def _locate_with_caption(self, soup: BeautifulSoup, policy: CaptionSelector, multiple_allowed: bool) -> List[Tag]:
        needle = policy.caption_text.lower()
        found: List[Tag] = []

        for table in soup.find_all("table"):
            caption = own_caption(table)
            if caption is None:
                continue
            if needle and needle not in normalize_text(caption).lower():
                continue
            found.append(table)
            if not multiple_allowed:
                break

        if not found:
            raise NotFoundError(
                f'No tables found with a caption containing "{policy.caption_text or "any text"}".',
                selector="caption",
                suggestions=[
                    "Check that the target table has a <caption> element",
                    "Leave the caption text empty to match any captioned table",
                    "Try another preset or switch to advanced mode",
                ],
            )
        return found
