"""
Aggregation & View Engine

Pure functions over already-fetched records. Nothing here talks to the
store; the dashboard flow fetches both lists and hands them in.

Pipeline for the transaction list:
    merge -> filter_transactions -> paginate
Totals are computed from the unfiltered lists.
"""

import math
from decimal import Decimal, localcontext
from typing import Iterable, Sequence, Union

from finance_tracker.models.record import (
    FilterMode,
    Page,
    RecordKind,
    StoredRecord,
    Totals,
    Transaction,
)


PAGE_SIZE = 10

_CENTS = Decimal("0.01")


class PageOutOfRangeError(ValueError):
    """Requested page is outside [1, total_pages]. Callers clamp first."""


def merge(
    income: Iterable[StoredRecord],
    expense: Iterable[StoredRecord],
) -> list[Transaction]:
    """
    Tag both lists with their kind and order them newest first.

    Sort key is (date, created_at), both descending. list.sort is stable
    with reverse=True, so full ties keep input order: incomes before
    expenses, each in the order given.
    """
    transactions = [
        Transaction(kind=RecordKind.INCOME, record=record) for record in income
    ] + [
        Transaction(kind=RecordKind.EXPENSE, record=record) for record in expense
    ]
    transactions.sort(
        key=lambda t: (t.record.date, t.record.created_at),
        reverse=True,
    )
    return transactions


def totals(
    income: Iterable[StoredRecord],
    expense: Iterable[StoredRecord],
) -> Totals:
    """Sum both lists with Decimal arithmetic. balance = income - expense, exactly."""
    income_total = sum((record.amount for record in income), Decimal("0"))
    expense_total = sum((record.amount for record in expense), Decimal("0"))
    return Totals(
        income_total=income_total,
        expense_total=expense_total,
        balance=income_total - expense_total,
    )


def filter_transactions(
    transactions: Sequence[Transaction],
    mode: Union[FilterMode, str] = FilterMode.ALL,
) -> list[Transaction]:
    """Keep one kind, or everything for FilterMode.ALL. Order is preserved."""
    mode = FilterMode(mode)
    if mode is FilterMode.ALL:
        return list(transactions)
    kind = RecordKind(mode.value)
    return [t for t in transactions if t.kind is kind]


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    """ceil(count / page_size), never less than 1."""
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return max(1, math.ceil(count / page_size))


def paginate(
    transactions: Sequence[Transaction],
    page: int = 1,
    page_size: int = PAGE_SIZE,
) -> Page:
    """
    Slice one page out of the filtered list.

    An empty list is a single empty page, not page 0.

    Raises:
        PageOutOfRangeError: page < 1 or page > total_pages
    """
    pages = total_pages(len(transactions), page_size)
    if page < 1 or page > pages:
        raise PageOutOfRangeError(f"Page {page} is out of range (1-{pages})")

    start = (page - 1) * page_size
    return Page(
        items=list(transactions[start:start + page_size]),
        page=page,
        total_pages=pages,
        total_items=len(transactions),
    )


def clamp_page(page: int, pages: int) -> int:
    """Bring a page number into [1, pages]."""
    return min(max(page, 1), max(pages, 1))


def page_after_delete(page: int, items_on_page: int) -> int:
    """
    Page to show after deleting one row from the current page.

    Deleting the only row of a page other than the first steps back one page.
    """
    if items_on_page == 1 and page > 1:
        return page - 1
    return page


def format_amount(amount: Decimal) -> str:
    """
    Currency display at 2 decimal places, e.g. $1,250.00 or -$80.50.

    Stored rows are not bounded, so the context precision is raised to fit
    every integer digit of the value.
    """
    value = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        value = value.quantize(_CENTS)
        sign = "-" if value < 0 else ""
        return f"{sign}${abs(value):,.2f}"


def format_signed(transaction: Transaction) -> str:
    """List-row display: +$ for income, -$ for expense."""
    sign = "+" if transaction.kind is RecordKind.INCOME else "-"
    return f"{sign}{format_amount(transaction.record.amount)}"
