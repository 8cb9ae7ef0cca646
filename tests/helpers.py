"""Builders shared by the test modules."""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal

from finance_tracker.models.record import (
    EntryForm,
    ExpenseRecord,
    IncomeRecord,
    RecordKind,
    record_model_for,
)


USER_EMAIL = "ana@example.com"
USER_PASSWORD = "secret123"


def run(coro):
    return asyncio.run(coro)


def make_record(
    kind: RecordKind,
    record_id: int,
    amount="10.00",
    on: date = date(2024, 1, 10),
    created_second: int = 0,
    user_id: str = "user-1",
    category: str = "Other",
    description: str = "entry",
):
    """A stored row with an explicit created_at (seconds after midnight UTC)."""
    return record_model_for(kind)(
        id=record_id,
        description=description,
        amount=Decimal(str(amount)),
        date=on,
        category=category,
        payment_method="Cash",
        user_id=user_id,
        created_at=datetime(2024, 1, 1, 0, 0, created_second, tzinfo=timezone.utc),
    )


def income(record_id, amount="10.00", on=date(2024, 1, 10), created_second=0, **kwargs) -> IncomeRecord:
    return make_record(RecordKind.INCOME, record_id, amount, on, created_second, **kwargs)


def expense(record_id, amount="10.00", on=date(2024, 1, 10), created_second=0, **kwargs) -> ExpenseRecord:
    return make_record(RecordKind.EXPENSE, record_id, amount, on, created_second, **kwargs)


def valid_form(**overrides) -> EntryForm:
    values = {
        "description": "Monthly salary",
        "amount": "1000.00",
        "date": "2024-01-10",
        "category": "Salary",
        "payment_method": "Transfer",
    }
    values.update(overrides)
    return EntryForm(**values)
