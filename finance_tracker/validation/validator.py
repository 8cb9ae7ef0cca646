"""
Entry Validation

Turns the raw add/edit form into a RecordDraft. Every field is required;
a missing field is an error, never silently defaulted.

Category is checked against the kind currently selected in the form, not
the kind the record was loaded from: switching kind mid-edit changes which
categories are valid.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from finance_tracker.errors import EntryValidationError
from finance_tracker.models.record import (
    PAYMENT_METHODS,
    EntryForm,
    PaymentMethod,
    RecordDraft,
    RecordKind,
    categories_for,
)


MAX_AMOUNT = Decimal("10000000000")

_CENTS = Decimal("0.01")


def parse_amount(text: str) -> Decimal:
    """
    Parse user-typed amount text into cents precision.

    Raises:
        ValueError: not a finite number, negative, too large, or more than
            two decimal places
    """
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError("Amount must be a number")
    if not value.is_finite():
        raise ValueError("Amount must be a number")
    if value < 0:
        raise ValueError("Amount cannot be negative")
    if value >= MAX_AMOUNT:
        raise ValueError("Amount must be less than 10,000,000,000")
    cents = value.quantize(_CENTS)
    if cents != value:
        raise ValueError("Amount can have at most 2 decimal places")
    return cents


def parse_date(value: Union[dt.date, str, None]) -> dt.date:
    """
    Raises:
        ValueError: empty or not a calendar date (YYYY-MM-DD)
    """
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not value or not value.strip():
        raise ValueError("Date is required")
    try:
        return dt.date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Not a valid date: {value}")


class EntryValidator:
    """Validates the add/edit form for one record kind."""

    def check(self, form: EntryForm, kind: RecordKind) -> dict[str, str]:
        """
        Collect field errors without raising.

        Returns:
            {field_name: message}; empty when the form is valid
        """
        errors: dict[str, str] = {}
        kind = RecordKind(kind)

        if not form.description.strip():
            errors["description"] = "Description is required"
        elif len(form.description.strip()) > 200:
            errors["description"] = "Description is too long (max 200 characters)"

        if not form.amount.strip():
            errors["amount"] = "Amount is required"
        else:
            try:
                parse_amount(form.amount)
            except ValueError as e:
                errors["amount"] = str(e)

        try:
            parse_date(form.date)
        except ValueError as e:
            errors["date"] = str(e)

        if not form.category:
            errors["category"] = "Category is required"
        elif form.category not in categories_for(kind):
            errors["category"] = f"Choose an {kind.value} category"

        if not form.payment_method:
            errors["payment_method"] = "Payment method is required"
        elif form.payment_method not in PAYMENT_METHODS:
            errors["payment_method"] = "Choose a payment method from the list"

        return errors

    def validate(self, form: EntryForm, kind: RecordKind) -> RecordDraft:
        """
        Raises:
            EntryValidationError: with one message per invalid field
        """
        errors = self.check(form, kind)
        if errors:
            raise EntryValidationError(errors)

        return RecordDraft(
            kind=RecordKind(kind),
            description=form.description,
            amount=parse_amount(form.amount),
            date=parse_date(form.date),
            category=form.category,
            payment_method=PaymentMethod(form.payment_method),
        )

    @staticmethod
    def switch_kind(form: EntryForm, kind: RecordKind) -> EntryForm:
        """
        The same form under another kind.

        A category that is not valid for the new kind is cleared; one valid
        for both (e.g. "Other") is kept.
        """
        if form.category and form.category not in categories_for(RecordKind(kind)):
            return form.model_copy(update={"category": ""})
        return form

    @staticmethod
    def default_form(today: Optional[dt.date] = None) -> EntryForm:
        """Empty form for a new record, dated today."""
        return EntryForm(date=today or dt.date.today())
