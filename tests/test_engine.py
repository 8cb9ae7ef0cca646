"""Tests for the aggregation and view engine."""

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.models.record import FilterMode, RecordKind, Transaction
from finance_tracker.queries import (
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
from tests.helpers import expense, income


def _mixed(count: int) -> list[Transaction]:
    """count transactions, alternating kinds, on distinct dates."""
    records_in, records_out = [], []
    for n in range(count):
        on = date(2024, 1, 1 + n % 28)
        if n % 2:
            records_out.append(expense(n, on=on, created_second=n))
        else:
            records_in.append(income(n, on=on, created_second=n))
    return merge(records_in, records_out)


class TestTotals:
    """Tests for totals and balance."""

    def test_basic_totals(self):
        """Test a salary and a rent payment."""
        result = totals(
            [income(1, amount="1000.00", on=date(2024, 1, 10))],
            [expense(1, amount="300.00", on=date(2024, 1, 5))],
        )
        assert result.income_total == Decimal("1000.00")
        assert result.expense_total == Decimal("300.00")
        assert result.balance == Decimal("700.00")

    def test_salary_and_two_expenses(self):
        """Test totals and order for one income and two same-day expenses."""
        incomes = [income(1, amount="1000", on=date(2024, 1, 10))]
        expenses = [
            expense(1, amount="250", on=date(2024, 1, 9), created_second=1),
            expense(2, amount="50", on=date(2024, 1, 9), created_second=2),
        ]
        result = totals(incomes, expenses)
        assert format_amount(result.income_total) == "$1,000.00"
        assert format_amount(result.expense_total) == "$300.00"
        assert format_amount(result.balance) == "$700.00"
        assert [t.list_key for t in merge(incomes, expenses)] == [
            "income-1", "expense-2", "expense-1",
        ]

    def test_empty(self):
        """Test no records means all zeros."""
        result = totals([], [])
        assert result.income_total == result.expense_total == result.balance == 0

    def test_decimal_exact(self):
        """Test 0.1 + 0.2 is exactly 0.3."""
        result = totals([income(1, amount="0.1"), income(2, amount="0.2")], [])
        assert result.income_total == Decimal("0.3")

    def test_negative_balance(self):
        """Test spending more than earned."""
        result = totals([income(1, amount="50")], [expense(1, amount="80.50")])
        assert result.balance == Decimal("-30.50")


class TestMerge:
    """Tests for merging and ordering both lists."""

    def test_newest_date_first(self):
        """Test the list is ordered by date descending across kinds."""
        merged = merge(
            [income(1, on=date(2024, 1, 10))],
            [expense(1, on=date(2024, 1, 5)), expense(2, on=date(2024, 1, 20))],
        )
        assert [t.list_key for t in merged] == ["expense-2", "income-1", "expense-1"]

    def test_created_at_breaks_date_ties(self):
        """Test same-day records show the most recently created first."""
        merged = merge(
            [income(1, created_second=5)],
            [expense(1, created_second=9)],
        )
        assert [t.list_key for t in merged] == ["expense-1", "income-1"]

    def test_full_ties_keep_input_order(self):
        """Test identical sort keys keep incomes before expenses."""
        merged = merge(
            [income(1), income(2)],
            [expense(1), expense(2)],
        )
        assert [t.list_key for t in merged] == [
            "income-1", "income-2", "expense-1", "expense-2",
        ]

    def test_same_id_in_both_tables(self):
        """Test colliding ids stay separate entries."""
        merged = merge([income(4)], [expense(4)])
        assert len({t.key for t in merged}) == 2

    def test_tags_kind(self):
        """Test every entry carries the kind of the list it came from."""
        merged = merge([income(1)], [expense(2)])
        kinds = {t.record.id: t.kind for t in merged}
        assert kinds == {1: RecordKind.INCOME, 2: RecordKind.EXPENSE}


class TestFilter:
    """Tests for the kind filter."""

    def test_all_keeps_everything(self):
        """Test FilterMode.ALL is the identity."""
        merged = _mixed(7)
        assert filter_transactions(merged, FilterMode.ALL) == merged

    def test_partition(self):
        """Test income and expense views split the list without overlap."""
        merged = _mixed(9)
        incomes = filter_transactions(merged, FilterMode.INCOME)
        expenses = filter_transactions(merged, "expense")
        assert all(t.kind is RecordKind.INCOME for t in incomes)
        assert all(t.kind is RecordKind.EXPENSE for t in expenses)
        assert not {t.key for t in incomes} & {t.key for t in expenses}
        assert len(incomes) + len(expenses) == len(merged)

    def test_preserves_order(self):
        """Test filtering keeps the merged order."""
        merged = _mixed(9)
        expenses = filter_transactions(merged, FilterMode.EXPENSE)
        assert expenses == [t for t in merged if t.kind is RecordKind.EXPENSE]

    def test_unknown_mode(self):
        """Test an unknown filter is rejected."""
        with pytest.raises(ValueError):
            filter_transactions([], "transfers")


class TestPagination:
    """Tests for pagination."""

    def test_page_sizes(self):
        """Test 23 items split into 10, 10 and 3."""
        merged = _mixed(23)
        sizes = [len(paginate(merged, page).items) for page in (1, 2, 3)]
        assert sizes == [10, 10, 3]
        assert paginate(merged, 1).total_pages == 3

    def test_pages_cover_list(self):
        """Test concatenating every page gives back the list."""
        merged = _mixed(23)
        pages = [paginate(merged, page).items for page in (1, 2, 3)]
        assert [t for items in pages for t in items] == merged

    def test_out_of_range(self):
        """Test pages past the end and below 1 are rejected."""
        merged = _mixed(23)
        with pytest.raises(PageOutOfRangeError):
            paginate(merged, 4)
        with pytest.raises(PageOutOfRangeError):
            paginate(merged, 0)

    def test_empty_is_one_page(self):
        """Test an empty list has exactly one empty page."""
        page = paginate([], 1)
        assert page.total_pages == 1
        assert page.items == []
        assert page.is_empty

    def test_total_pages(self):
        """Test the page count formula."""
        assert total_pages(0) == 1
        assert total_pages(10) == 1
        assert total_pages(11) == 2
        assert total_pages(5, page_size=2) == 3

    def test_total_pages_rejects_zero_size(self):
        """Test a zero page size is a programming error."""
        with pytest.raises(ValueError):
            total_pages(5, page_size=0)

    def test_custom_page_size(self):
        """Test a smaller page size."""
        page = paginate(_mixed(5), 3, page_size=2)
        assert len(page.items) == 1
        assert not page.has_next

    def test_clamp_page(self):
        """Test page numbers are brought into range."""
        assert clamp_page(0, 3) == 1
        assert clamp_page(5, 3) == 3
        assert clamp_page(2, 3) == 2
        assert clamp_page(4, 0) == 1


class TestPageAfterDelete:
    """Tests for the page shown after a delete."""

    def test_last_item_of_later_page(self):
        """Test deleting the only row of page 3 goes back to page 2."""
        assert page_after_delete(3, 1) == 2

    def test_last_item_of_first_page(self):
        """Test page 1 never goes to page 0."""
        assert page_after_delete(1, 1) == 1

    def test_page_with_other_rows(self):
        """Test the page stays when rows remain on it."""
        assert page_after_delete(2, 4) == 2


class TestFormatting:
    """Tests for currency display."""

    def test_format_amount(self):
        """Test thousands separators and two decimals."""
        assert format_amount(Decimal("1250")) == "$1,250.00"
        assert format_amount(Decimal("-80.5")) == "-$80.50"
        assert format_amount(Decimal("0")) == "$0.00"

    def test_format_beyond_default_precision(self):
        """Test values with more than 28 digits still format."""
        assert format_amount(Decimal("1e30")) == "$1" + ",000" * 10 + ".00"
        assert format_amount(Decimal("-123456789012345678901234567890.5")) == (
            "-$123,456,789,012,345,678,901,234,567,890.50"
        )

    def test_format_signed(self):
        """Test income rows show + and expense rows show -."""
        assert format_signed(Transaction(kind=RecordKind.INCOME, record=income(1, amount="1000"))) == "+$1,000.00"
        assert format_signed(Transaction(kind=RecordKind.EXPENSE, record=expense(1, amount="80.5"))) == "-$80.50"
