"""
Pagination helpers for list endpoints.

Turns raw query-string values into a PageRequest and derives the response
metadata from a total item count.
"""

import math
from dataclasses import dataclass
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def parse_positive_int(raw: Any, default: int) -> int:
    """
    Parse a query parameter as a positive integer.

    Missing, non-numeric, zero or negative values fall back to ``default``.
    """
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and page size."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(cls, page: Any = None, limit: Any = None) -> "PageRequest":
        return cls(
            page=parse_positive_int(page, DEFAULT_PAGE),
            limit=parse_positive_int(limit, DEFAULT_LIMIT),
        )


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata returned alongside a page of results."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool


def build_pagination(request: PageRequest, total_items: int) -> Pagination:
    """Compute page metadata for ``total_items`` rows split by ``request.limit``."""
    total_pages = math.ceil(total_items / request.limit)
    return Pagination(
        current_page=request.page,
        total_pages=total_pages,
        total_items=total_items,
        items_per_page=request.limit,
        has_next=request.page < total_pages,
        has_prev=request.page > 1,
    )
