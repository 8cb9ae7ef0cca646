"""
In-memory storage implementation.

Behaves like a Supabase table for the operations the tracker uses: ids are
assigned per table starting at 1, created_at is assigned on insert and
increases strictly, and the list query is scoped to one user and ordered by
(date desc, created_at desc). Rows are kept as plain dicts and decoded on
the way out, so a malformed row fails the same way it would from Supabase.

Used by the test suite and by STORAGE_BACKEND=memory for local demos.
fail_next() makes the next call of one operation fail with a given message,
which is how tests reach the store-error paths.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from finance_tracker.errors import NotFoundError, StoreError
from finance_tracker.models.record import RecordDraft, RecordKind, StoredRecord
from finance_tracker.services.storage.interface import (
    RecordStore,
    RecordTableInterface,
    decode_row,
)


class InMemoryRecordTable(RecordTableInterface):
    """In-memory implementation of one record table."""

    _EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __init__(self, kind: RecordKind):
        self.kind = RecordKind(kind)
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1
        self._ticks = 0
        self._failures: dict[str, str] = {}
        self.calls: list[str] = []

    def fail_next(self, operation: str, message: str) -> None:
        """Make the next `operation` ("list", "get", "insert", ...) raise StoreError."""
        self._failures[operation] = message

    async def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        # Yield once so concurrent callers interleave like real requests.
        await asyncio.sleep(0)
        message = self._failures.pop(operation, None)
        if message is not None:
            raise StoreError(message)

    def _now(self) -> datetime:
        self._ticks += 1
        return self._EPOCH + timedelta(seconds=self._ticks)

    def add_raw_row(self, row: dict[str, Any]) -> dict[str, Any]:
        """
        Seed a row exactly as given, the way another client could have
        written it. Only id and created_at are filled in when missing.
        """
        row = dict(row)
        row.setdefault("id", self._next_id)
        row.setdefault("created_at", self._now())
        self._next_id = max(self._next_id, row["id"]) + 1
        self._rows[row["id"]] = row
        return row

    def add_row(self, row: dict[str, Any]) -> StoredRecord:
        """Seed a well-formed row directly, bypassing validation of the draft."""
        return decode_row(self.kind, self.add_raw_row(row))

    @property
    def ids(self) -> list[int]:
        return sorted(self._rows)

    async def list_for_user(self, user_id: str) -> list[StoredRecord]:
        await self._enter("list")
        records = [
            decode_row(self.kind, row)
            for row in self._rows.values()
            if row.get("user_id") == user_id
        ]
        records.sort(key=lambda r: (r.date, r.created_at), reverse=True)
        return records

    async def get(self, record_id: int) -> Optional[StoredRecord]:
        await self._enter("get")
        row = self._rows.get(record_id)
        return decode_row(self.kind, row) if row is not None else None

    async def insert(self, draft: RecordDraft, user_id: str) -> StoredRecord:
        await self._enter("insert")
        row = draft.to_row(user_id)
        row["id"] = self._next_id
        row["created_at"] = self._now()
        self._next_id += 1
        self._rows[row["id"]] = row
        return decode_row(self.kind, row)

    async def update(self, record_id: int, draft: RecordDraft, user_id: str) -> StoredRecord:
        await self._enter("update")
        existing = self._rows.get(record_id)
        if existing is None:
            raise NotFoundError(f"{self.kind.label} record {record_id} not found")
        row = draft.to_row(user_id)
        row["id"] = record_id
        row["created_at"] = existing["created_at"]
        self._rows[record_id] = row
        return decode_row(self.kind, row)

    async def delete(self, record_id: int) -> bool:
        await self._enter("delete")
        return self._rows.pop(record_id, None) is not None


def create_memory_store() -> RecordStore:
    return RecordStore(
        income=InMemoryRecordTable(RecordKind.INCOME),
        expense=InMemoryRecordTable(RecordKind.EXPENSE),
    )
