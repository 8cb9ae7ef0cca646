"""
Supabase Storage Implementation

Each record kind is one Postgres table exposed through Supabase's REST API.
Row-level security restricts every row to the user that created it, so the
anon key plus the signed-in user's session is all the client needs.

TRADEOFFS:
- The supabase client is synchronous; calls are pushed to a worker thread
  with asyncio.to_thread so the income and expense fetches overlap.
- No retry and no timeout beyond the transport defaults. A failed call
  surfaces once, with the backend's own message.
"""

import asyncio
from typing import Any, Optional

from pydantic import ValidationError
from supabase import Client, create_client

from finance_tracker.config import get_settings
from finance_tracker.errors import ConnectionError, NotFoundError, StoreError
from finance_tracker.models.record import (
    RecordDraft,
    RecordKind,
    StoredRecord,
)
from finance_tracker.services.storage.interface import (
    RecordStore,
    RecordTableInterface,
    decode_row,
)


def backend_message(error: Exception) -> str:
    """The message the backend attached to an error, falling back to str()."""
    message = getattr(error, "message", None)
    return message if isinstance(message, str) and message else str(error)


class SupabaseClient:
    """
    Low-level Supabase client wrapper.

    Builds the client lazily from SUPABASE_URL / SUPABASE_ANON_KEY. Missing
    configuration raises ConnectionError; there is no fallback.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    def connect(self) -> Client:
        if self._client is None:
            try:
                settings = get_settings().supabase
            except ValidationError as e:
                raise ConnectionError(
                    f"Supabase is not configured (set SUPABASE_URL and SUPABASE_ANON_KEY): {e}"
                ) from e
            try:
                self._client = create_client(settings.url, settings.anon_key)
            except Exception as e:
                raise ConnectionError(f"Failed to create Supabase client: {e}") from e
        return self._client

    def table_name(self, kind: RecordKind) -> str:
        settings = get_settings().supabase
        if kind is RecordKind.INCOME:
            return settings.income_table
        return settings.expense_table


class SupabaseRecordTable(RecordTableInterface):
    """Supabase implementation of one record table."""

    def __init__(
        self,
        kind: RecordKind,
        client: SupabaseClient,
        table_name: Optional[str] = None,
    ):
        self.kind = RecordKind(kind)
        self._client = client
        self._table_name = table_name

    def _table(self):
        name = self._table_name or self._client.table_name(self.kind)
        return self._client.connect().table(name)

    async def _execute(self, query) -> list[dict[str, Any]]:
        try:
            response = await asyncio.to_thread(query.execute)
        except Exception as e:
            raise StoreError(backend_message(e)) from e
        return list(response.data or [])

    def _to_record(self, row: dict[str, Any]) -> StoredRecord:
        return decode_row(self.kind, row)

    async def list_for_user(self, user_id: str) -> list[StoredRecord]:
        query = (
            self._table()
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=True)
            .order("created_at", desc=True)
        )
        rows = await self._execute(query)
        return [self._to_record(row) for row in rows]

    async def get(self, record_id: int) -> Optional[StoredRecord]:
        query = self._table().select("*").eq("id", record_id).limit(1)
        rows = await self._execute(query)
        if not rows:
            return None
        return self._to_record(rows[0])

    async def insert(self, draft: RecordDraft, user_id: str) -> StoredRecord:
        query = self._table().insert(draft.to_row(user_id))
        rows = await self._execute(query)
        if not rows:
            raise StoreError(f"Insert into {self.kind.value} records returned no row")
        return self._to_record(rows[0])

    async def update(self, record_id: int, draft: RecordDraft, user_id: str) -> StoredRecord:
        query = self._table().update(draft.to_row(user_id)).eq("id", record_id)
        rows = await self._execute(query)
        if not rows:
            raise NotFoundError(f"{self.kind.label} record {record_id} not found")
        return self._to_record(rows[0])

    async def delete(self, record_id: int) -> bool:
        query = self._table().delete().eq("id", record_id)
        rows = await self._execute(query)
        return len(rows) > 0


def create_supabase_store(client: Optional[SupabaseClient] = None) -> RecordStore:
    """Both tables on one shared client."""
    client = client or SupabaseClient()
    return RecordStore(
        income=SupabaseRecordTable(RecordKind.INCOME, client),
        expense=SupabaseRecordTable(RecordKind.EXPENSE, client),
    )
