"""Entry validation package."""

from finance_tracker.validation.validator import EntryValidator, parse_amount, parse_date

__all__ = ["EntryValidator", "parse_amount", "parse_date"]
