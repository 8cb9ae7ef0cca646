"""
Abstract Storage Interface

The record store holds two parallel tables, one per RecordKind. Each table
is reached through the same small capability interface
(RecordTableInterface); RecordStore picks the implementation by kind, so no
caller ever branches on table names.

Implementations:
- SupabaseRecordTable: the real backend (row-level security on user_id)
- InMemoryRecordTable: tests and local demo mode

Ownership is enforced by the backend. Implementations only scope the list
query to the user; they do not re-check ownership on get/update/delete.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import ValidationError

from finance_tracker.errors import StoreError
from finance_tracker.models.record import (
    RecordDraft,
    RecordKind,
    StoredRecord,
    record_model_for,
)


def decode_row(kind: RecordKind, row: dict[str, Any]) -> StoredRecord:
    """
    Build the record model for one table row.

    Raises:
        StoreError: the row does not match the record schema
    """
    try:
        return record_model_for(kind).from_row(row)
    except ValidationError as e:
        fields = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise StoreError(
            f"Could not read {RecordKind(kind).value} record {row.get('id')}: {fields}"
        ) from e


class RecordTableInterface(ABC):
    """
    Abstract interface for one record table.

    All methods raise StoreError (with the backend's message) when the
    backend call fails.
    """

    kind: RecordKind

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[StoredRecord]:
        """
        List every record owned by user_id.

        Returns:
            Records ordered by date descending, then created_at descending
        """
        pass

    @abstractmethod
    async def get(self, record_id: int) -> Optional[StoredRecord]:
        """
        Retrieve a record by id.

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, draft: RecordDraft, user_id: str) -> StoredRecord:
        """
        Insert a new record owned by user_id.

        Returns:
            The stored row, with its store-assigned id and created_at
        """
        pass

    @abstractmethod
    async def update(self, record_id: int, draft: RecordDraft, user_id: str) -> StoredRecord:
        """
        Overwrite every field of an existing record.

        Raises:
            NotFoundError: If no row has this id
        """
        pass

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a row was deleted
        """
        pass


class RecordStore:
    """Both record tables, selected by kind."""

    def __init__(self, income: RecordTableInterface, expense: RecordTableInterface):
        if income.kind is not RecordKind.INCOME or expense.kind is not RecordKind.EXPENSE:
            raise ValueError("RecordStore needs an income table and an expense table")
        self._tables = {
            RecordKind.INCOME: income,
            RecordKind.EXPENSE: expense,
        }

    def table(self, kind: RecordKind) -> RecordTableInterface:
        return self._tables[RecordKind(kind)]
