"""
Storage Services Package

Abstract record-table interface plus the Supabase and in-memory
implementations.
"""

from finance_tracker.services.storage.interface import (
    RecordStore,
    RecordTableInterface,
)
from finance_tracker.services.storage.memory import (
    InMemoryRecordTable,
    create_memory_store,
)
from finance_tracker.services.storage.supabase_store import (
    SupabaseClient,
    SupabaseRecordTable,
    backend_message,
    create_supabase_store,
)

__all__ = [
    # Interfaces
    "RecordStore",
    "RecordTableInterface",
    # In-memory implementation
    "InMemoryRecordTable",
    "create_memory_store",
    # Supabase implementation
    "SupabaseClient",
    "SupabaseRecordTable",
    "backend_message",
    "create_supabase_store",
]
