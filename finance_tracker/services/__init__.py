"""Services package."""

from finance_tracker.services.auth import (
    AuthBackendInterface,
    InMemoryAuthBackend,
    SupabaseAuthBackend,
)
from finance_tracker.services.storage import (
    InMemoryRecordTable,
    RecordStore,
    RecordTableInterface,
    SupabaseClient,
    SupabaseRecordTable,
    create_memory_store,
    create_supabase_store,
)

__all__ = [
    # Auth
    "AuthBackendInterface",
    "InMemoryAuthBackend",
    "SupabaseAuthBackend",
    # Storage
    "InMemoryRecordTable",
    "RecordStore",
    "RecordTableInterface",
    "SupabaseClient",
    "SupabaseRecordTable",
    "create_memory_store",
    "create_supabase_store",
]
