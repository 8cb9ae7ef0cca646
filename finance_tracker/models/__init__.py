"""
Data Models Package

All data flowing through the tracker conforms to these pydantic schemas.
"""

from finance_tracker.models.record import (
    PAYMENT_METHODS,
    EntryForm,
    ExpenseCategory,
    ExpenseRecord,
    FilterMode,
    IncomeCategory,
    IncomeRecord,
    Page,
    PaymentMethod,
    RecordDraft,
    RecordKind,
    StoredRecord,
    Totals,
    Transaction,
    UserIdentity,
    categories_for,
    record_model_for,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "PAYMENT_METHODS",
    "EntryForm",
    "ExpenseCategory",
    "ExpenseRecord",
    "FilterMode",
    "IncomeCategory",
    "IncomeRecord",
    "Page",
    "PaymentMethod",
    "RecordDraft",
    "RecordKind",
    "StoredRecord",
    "Totals",
    "Transaction",
    "UserIdentity",
    "categories_for",
    "record_model_for",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
