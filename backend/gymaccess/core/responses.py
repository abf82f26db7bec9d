"""Standardized API response helpers.

Paginated endpoints return the page under a resource-specific key plus a
``pagination`` block:

    {"logs": [...], "pagination": {"page": 1, "limit": 50, "total": 120, "pages": 3}}
"""

import math


def paginated_response(key: str, items: list, total: int, page: int, limit: int) -> dict:
    """Wrap a page of serialized items in the standard envelope.

    Args:
        key: Name of the list field (e.g. "logs").
        items: The page of serialized items.
        total: Total count across all pages.
        page: 1-based page number requested.
        limit: Page size requested.
    """
    return {
        key: items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if limit else 0,
        },
    }


def isoformat(value) -> str | None:
    """ISO-8601 string for a date/datetime, or None."""
    return value.isoformat() if value is not None else None
