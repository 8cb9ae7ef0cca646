"""Aggregation and view engine."""

from finance_tracker.queries.engine import (
    PAGE_SIZE,
    PageOutOfRangeError,
    clamp_page,
    filter_transactions,
    format_amount,
    format_signed,
    merge,
    page_after_delete,
    paginate,
    total_pages,
    totals,
)

__all__ = [
    "PAGE_SIZE",
    "PageOutOfRangeError",
    "clamp_page",
    "filter_transactions",
    "format_amount",
    "format_signed",
    "merge",
    "page_after_delete",
    "paginate",
    "total_pages",
    "totals",
]
