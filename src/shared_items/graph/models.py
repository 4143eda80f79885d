"""Data models for Graph API collection pages and the accumulated result."""

from __future__ import annotations

import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from shared_items.graph.errors import ParseError

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

# Items are passed through exactly as the API returns them.
DriveItem = dict[str, Any]


@dataclass
class GraphPage:
    """A single collection response: a slice of items plus an optional cursor."""

    items: list[DriveItem] = field(default_factory=list)
    next_link: str | None = None

    @property
    def has_next(self) -> bool:
        return bool(self.next_link)


@dataclass
class ItemCollection:
    """All items of a collection, in page-arrival then intra-page order."""

    items: list[DriveItem] = field(default_factory=list)

    def extend(self, page: GraphPage) -> None:
        self.items.extend(page.items)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[DriveItem]:
        return iter(self.items)


def parse_page(body: str | bytes) -> GraphPage:
    """Parse a raw response body into a GraphPage.

    ``value`` may be absent or null (no items) and ``@odata.nextLink`` may be
    absent, null or empty (last page). Anything else that does not match the
    collection shape is rejected.

    Args:
        body: Raw response body.

    Returns:
        The parsed page.

    Raises:
        ParseError: If the body is not JSON or does not have the page structure.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise ParseError(text, f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(text, f"expected a JSON object, got {type(data).__name__}")

    raw_items = data.get(ODATA_VALUE)
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise ParseError(text, f"'{ODATA_VALUE}' must be an array")
    for index, item in enumerate(raw_items):
        if not isinstance(item, dict):
            raise ParseError(text, f"'{ODATA_VALUE}[{index}]' must be an object")

    next_link = data.get(ODATA_NEXT_LINK)
    if next_link is not None and not isinstance(next_link, str):
        raise ParseError(text, f"'{ODATA_NEXT_LINK}' must be a string")

    return GraphPage(items=raw_items, next_link=next_link or None)
