"""
Error taxonomy.

Every error a user action can hit derives from TrackerError. The UI turns
any TrackerError into a single message (see finance_tracker.actions);
nothing here is meant to reach the top of the process.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from finance_tracker.models.record import RecordDraft


class TrackerError(Exception):
    """Base exception for the tracker."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def user_message(self) -> str:
        return self.message


class EntryValidationError(TrackerError):
    """The add/edit form has invalid fields."""

    def __init__(self, field_errors: dict[str, str]):
        self.field_errors = dict(field_errors)
        super().__init__(
            "Please fix the highlighted fields: " + ", ".join(sorted(self.field_errors))
        )


class AuthError(TrackerError):
    """No session, or the auth backend refused the credentials."""


class StoreError(TrackerError):
    """The record store failed. The message is the backend's, verbatim."""


class NotFoundError(StoreError):
    """Entity not found in storage. Benign for edit targets."""


class ConnectionError(StoreError):
    """Could not build a client for the store (missing or bad configuration)."""


class RecordLostError(StoreError):
    """
    A kind change deleted the old row but the insert into the new table failed.

    The record now exists in neither table. draft holds the submitted fields
    so the caller can offer to create it again.
    """

    def __init__(self, message: str, draft: Optional["RecordDraft"] = None):
        super().__init__(message)
        self.draft = draft
