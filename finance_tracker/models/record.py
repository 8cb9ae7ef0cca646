"""
Core Data Models for Finance Tracker

Income and expense records are structurally identical. Which table holds a
record is what makes it income or expense, so the kind is carried next to
the record (RecordKind, Transaction) and never stored as a column.

Models:
- EntryForm: raw field values as typed by the user (amount may be text)
- RecordDraft: validated fields, ready to be written to a table
- IncomeRecord / ExpenseRecord: rows as returned by the store
- Transaction: a record tagged with its kind, for display
- Totals / Page: results of the aggregation engine
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecordKind(str, Enum):
    """Which of the two parallel tables a record lives in."""
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        return "Income" if self is RecordKind.INCOME else "Expense"

    def toggled(self) -> "RecordKind":
        """The other kind. Used by the edit form's reclassification toggle."""
        return RecordKind.EXPENSE if self is RecordKind.INCOME else RecordKind.INCOME


class IncomeCategory(str, Enum):
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENTS = "Investments"
    SALES = "Sales"
    OTHER = "Other"


class ExpenseCategory(str, Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    """Payment methods, shared by both kinds."""
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    TRANSFER = "Transfer"
    OTHER = "Other"


class FilterMode(str, Enum):
    """Transaction list filter."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


_CATEGORIES = {
    RecordKind.INCOME: [c.value for c in IncomeCategory],
    RecordKind.EXPENSE: [c.value for c in ExpenseCategory],
}

PAYMENT_METHODS = [m.value for m in PaymentMethod]


def categories_for(kind: RecordKind) -> list[str]:
    """Allowed category values for a kind."""
    return list(_CATEGORIES[RecordKind(kind)])


# =============================================================================
# USER / SESSION
# =============================================================================

class UserIdentity(BaseModel):
    """The authenticated user, as reported by the auth backend."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    email: Optional[str] = None


# =============================================================================
# INPUT MODELS
# =============================================================================

class EntryForm(BaseModel):
    """
    Raw values of the add/edit form.

    Nothing here is trusted: amount may be free text and category may belong
    to the other kind. EntryValidator turns this into a RecordDraft.
    """
    description: str = ""
    amount: str = ""
    date: Union[dt.date, str, None] = Field(default_factory=dt.date.today)
    category: str = ""
    payment_method: str = ""

    @field_validator('amount', mode='before')
    @classmethod
    def amount_as_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)


class RecordDraft(BaseModel):
    """
    Validated record fields for one kind, ready to persist.

    The store assigns id and created_at; the owner comes from the session.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    kind: RecordKind
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    date: dt.date
    category: str
    payment_method: PaymentMethod

    @model_validator(mode='after')
    def category_matches_kind(self) -> 'RecordDraft':
        if self.category not in _CATEGORIES[self.kind]:
            raise ValueError(
                f"Category {self.category!r} is not valid for {self.kind.value}"
            )
        return self

    def to_row(self, user_id: str) -> dict[str, Any]:
        """Column payload for insert/update. All fields are overwritten."""
        return {
            "description": self.description,
            "amount": str(self.amount),
            "date": self.date.isoformat(),
            "category": self.category,
            "payment_method": self.payment_method.value,
            "user_id": user_id,
        }


# =============================================================================
# STORED RECORDS
# =============================================================================

class StoredRecord(BaseModel):
    """
    A row from either record table.

    Category is kept as plain text: the store does not enforce the enums,
    and a bad row must still be listable and deletable.
    """
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[RecordKind]

    id: int
    description: str
    amount: Decimal = Field(..., ge=0)
    date: dt.date
    category: str
    payment_method: str
    user_id: str
    created_at: dt.datetime

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v: Any) -> Any:
        # Numeric columns come back as JSON floats; go through str to keep
        # the decimal digits as written.
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "StoredRecord":
        return cls.model_validate(row)

    def to_form(self) -> EntryForm:
        return EntryForm(
            description=self.description,
            amount=str(self.amount),
            date=self.date,
            category=self.category,
            payment_method=self.payment_method,
        )


class IncomeRecord(StoredRecord):
    kind: ClassVar[RecordKind] = RecordKind.INCOME


class ExpenseRecord(StoredRecord):
    kind: ClassVar[RecordKind] = RecordKind.EXPENSE


def record_model_for(kind: RecordKind) -> type[StoredRecord]:
    return IncomeRecord if RecordKind(kind) is RecordKind.INCOME else ExpenseRecord


# =============================================================================
# VIEW MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A record tagged with its kind.

    (kind, id) is the identity used for list keys, edit targeting and
    deletion; ids alone collide across the two tables.
    """
    model_config = ConfigDict(frozen=True)

    kind: RecordKind
    record: StoredRecord

    @model_validator(mode='after')
    def record_matches_kind(self) -> 'Transaction':
        if self.record.kind is not self.kind:
            raise ValueError(
                f"{type(self.record).__name__} cannot be tagged {self.kind.value}"
            )
        return self

    @property
    def key(self) -> tuple[RecordKind, int]:
        return (self.kind, self.record.id)

    @property
    def list_key(self) -> str:
        return f"{self.kind.value}-{self.record.id}"

    @property
    def signed_amount(self) -> Decimal:
        return self.record.amount if self.kind is RecordKind.INCOME else -self.record.amount


class Totals(BaseModel):
    """Running totals. balance is exactly income_total - expense_total."""
    model_config = ConfigDict(frozen=True)

    income_total: Decimal
    expense_total: Decimal
    balance: Decimal


class Page(BaseModel):
    """One page of the filtered transaction list."""
    model_config = ConfigDict(frozen=True)

    items: list[Transaction]
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)

    @property
    def is_empty(self) -> bool:
        return self.total_items == 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
