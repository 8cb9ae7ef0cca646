"""Auth backends."""

from finance_tracker.services.auth.interface import (
    AuthBackendInterface,
    SessionListener,
    Unsubscribe,
)
from finance_tracker.services.auth.memory import InMemoryAuthBackend
from finance_tracker.services.auth.supabase_auth import SupabaseAuthBackend

__all__ = [
    "AuthBackendInterface",
    "InMemoryAuthBackend",
    "SessionListener",
    "SupabaseAuthBackend",
    "Unsubscribe",
]
