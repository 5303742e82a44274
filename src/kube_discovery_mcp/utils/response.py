"""Response shaping helpers shared by MCP tools."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

T = TypeVar("T")


class Verbosity(str, Enum):
    """How much of each record a tool response includes."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"

    @classmethod
    def from_str(cls, value: str | None, default: Verbosity | None = None) -> Verbosity:
        """Parse a verbosity string, falling back to a default for unknown values."""
        fallback = default or cls.STANDARD
        if not value:
            return fallback
        try:
            return cls(value.lower())
        except ValueError:
            return fallback


def paginate(items: list[T], offset: int = 0, limit: int | None = None) -> tuple[list[T], int]:
    """Slice a list for pagination.

    Args:
        items: Full list of items.
        offset: Number of items to skip.
        limit: Maximum number of items to return (None for all).

    Returns:
        Tuple of (page items, total item count).
    """
    total = len(items)
    offset = max(offset, 0)
    if limit is None:
        return items[offset:], total
    return items[offset : offset + limit], total
