"""
Tests for Finance Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, engine)
2. Flow tests against the in-memory store and auth backend
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from finance_tracker.models.record import (
    PAYMENT_METHODS,
    EntryForm,
    ExpenseCategory,
    ExpenseRecord,
    IncomeCategory,
    IncomeRecord,
    Page,
    PaymentMethod,
    RecordDraft,
    RecordKind,
    Transaction,
    categories_for,
    record_model_for,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from tests.helpers import expense, income


class TestRecordKind:
    """Tests for the record kind enum."""

    def test_toggled(self):
        """Test toggling flips between the two kinds."""
        assert RecordKind.INCOME.toggled() is RecordKind.EXPENSE
        assert RecordKind.EXPENSE.toggled() is RecordKind.INCOME

    def test_labels(self):
        """Test display labels."""
        assert RecordKind.INCOME.label == "Income"
        assert RecordKind.EXPENSE.label == "Expense"

    def test_categories_per_kind(self):
        """Test each kind has its own category set, sharing only Other."""
        income_categories = set(categories_for(RecordKind.INCOME))
        expense_categories = set(categories_for(RecordKind.EXPENSE))
        assert income_categories == {c.value for c in IncomeCategory}
        assert expense_categories == {c.value for c in ExpenseCategory}
        assert income_categories & expense_categories == {"Other"}

    def test_categories_for_returns_copy(self):
        """Test callers cannot mutate the shared category list."""
        categories_for(RecordKind.INCOME).append("Lottery")
        assert "Lottery" not in categories_for(RecordKind.INCOME)

    def test_payment_methods(self):
        """Test payment methods are shared by both kinds."""
        assert PAYMENT_METHODS == ["Cash", "Credit Card", "Debit Card", "Transfer", "Other"]


class TestEntryForm:
    """Tests for the raw form model."""

    def test_defaults(self):
        """Test an empty form is dated today with blank fields."""
        form = EntryForm()
        assert form.description == ""
        assert form.amount == ""
        assert form.date == date.today()

    def test_amount_coerced_to_text(self):
        """Test numeric amounts are kept as text for the validator."""
        assert EntryForm(amount=Decimal("12.50")).amount == "12.50"
        assert EntryForm(amount=None).amount == ""


class TestRecordDraft:
    """Tests for the validated draft model."""

    def _draft(self, **overrides):
        values = {
            "kind": RecordKind.EXPENSE,
            "description": "Groceries",
            "amount": Decimal("80.50"),
            "date": date(2024, 1, 5),
            "category": "Food",
            "payment_method": "Cash",
        }
        values.update(overrides)
        return RecordDraft(**values)

    def test_creation(self):
        """Test a valid draft."""
        draft = self._draft()
        assert draft.amount == Decimal("80.50")
        assert draft.payment_method is PaymentMethod.CASH

    def test_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        assert self._draft(description="  Groceries  ").description == "Groceries"

    def test_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            self._draft(amount=Decimal("-1"))

    def test_rejects_category_of_other_kind(self):
        """Test an income category cannot be saved as expense."""
        with pytest.raises(ValueError, match="not valid for expense"):
            self._draft(category="Salary")

    def test_rejects_amount_beyond_cents_range(self):
        """Test drafts hold at most 12 digits with 2 decimal places."""
        with pytest.raises(ValueError):
            self._draft(amount=Decimal("1e30"))
        with pytest.raises(ValueError):
            self._draft(amount=Decimal("1.005"))

    def test_to_row(self):
        """Test the column payload keeps exact decimals and ISO dates."""
        row = self._draft().to_row("user-1")
        assert row == {
            "description": "Groceries",
            "amount": "80.50",
            "date": "2024-01-05",
            "category": "Food",
            "payment_method": "Cash",
            "user_id": "user-1",
        }


class TestStoredRecord:
    """Tests for rows coming back from the store."""

    def test_from_row_float_amount(self):
        """Test float amounts from JSON keep their written digits."""
        record = IncomeRecord.from_row({
            "id": 1,
            "description": "Gig",
            "amount": 0.1,
            "date": "2024-02-01",
            "category": "Freelance",
            "payment_method": "Transfer",
            "user_id": "user-1",
            "created_at": "2024-02-01T10:00:00+00:00",
        })
        assert record.amount == Decimal("0.1")
        assert record.date == date(2024, 2, 1)

    def test_kind_follows_model(self):
        """Test the kind is carried by the model class, not a column."""
        assert record_model_for(RecordKind.INCOME) is IncomeRecord
        assert record_model_for(RecordKind.EXPENSE) is ExpenseRecord
        assert expense(1).kind is RecordKind.EXPENSE

    def test_to_form(self):
        """Test an existing record fills the edit form."""
        form = income(3, amount="250.00", category="Sales").to_form()
        assert form.amount == "250.00"
        assert form.category == "Sales"
        assert form.payment_method == "Cash"


class TestTransaction:
    """Tests for kind-tagged transactions."""

    def test_identity_includes_kind(self):
        """Test records with the same id in both tables stay distinct."""
        a = Transaction(kind=RecordKind.INCOME, record=income(7))
        b = Transaction(kind=RecordKind.EXPENSE, record=expense(7))
        assert a.key != b.key
        assert a.list_key == "income-7"
        assert b.list_key == "expense-7"

    def test_signed_amount(self):
        """Test expenses count negative."""
        assert Transaction(kind=RecordKind.EXPENSE, record=expense(1, amount="5")).signed_amount == Decimal("-5")
        assert Transaction(kind=RecordKind.INCOME, record=income(1, amount="5")).signed_amount == Decimal("5")

    def test_kind_must_match_record(self):
        """Test an expense row cannot be tagged as income."""
        with pytest.raises(ValueError, match="cannot be tagged income"):
            Transaction(kind=RecordKind.INCOME, record=expense(1))


class TestPage:
    """Tests for the page model."""

    def test_navigation_flags(self):
        """Test previous/next availability."""
        page = Page(items=[], page=2, total_pages=3, total_items=25)
        assert page.has_previous and page.has_next
        last = Page(items=[], page=3, total_pages=3, total_items=25)
        assert not last.has_next

    def test_empty(self):
        """Test an empty list is one empty page."""
        page = Page(items=[], page=1, total_pages=1, total_items=0)
        assert page.is_empty
        assert not page.has_previous and not page.has_next


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Record created",
        )
        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            description="Record deleted",
            entity_id="expense-3",
            user_id="user-1",
            correlation_id=correlation_id,
            details={"amount": "80.50"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_deleted"
        assert log_dict["entity_id"] == "expense-3"
        assert log_dict["correlation_id"] == str(correlation_id)
        assert log_dict["details"]["amount"] == "80.50"

    def test_builder_record_moved(self):
        """Test AuditEventBuilder.record_moved keeps both identities."""
        correlation_id = uuid4()
        event = AuditEventBuilder.record_moved(
            old_entity_id="income-7",
            new_entity_id="expense-12",
            user_id="user-1",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.RECORD_MOVED
        assert event.entity_id == "expense-12"
        assert event.details["previous"] == "income-7"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_builder_record_lost_is_critical(self):
        """Test a lost record is logged at critical severity."""
        event = AuditEventBuilder.record_lost(
            old_entity_id="income-7",
            user_id="user-1",
            error_message="insert failed",
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.CRITICAL
        assert event.error_message == "insert failed"

    def test_builder_validation_failed(self):
        """Test only field names, not values, are recorded."""
        event = AuditEventBuilder.validation_failed(
            kind="income",
            field_errors={"amount": "Amount is required", "category": "Category is required"},
        )
        assert event.details == {"kind": "income", "fields": ["amount", "category"]}
        assert event.severity == AuditSeverity.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
