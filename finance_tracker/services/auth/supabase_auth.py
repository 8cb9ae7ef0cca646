"""
Supabase Auth Implementation

Email/password auth through the supabase client's auth API. The client keeps
the session and pushes changes through on_auth_state_change.
"""

import asyncio
from typing import Any, Optional

from finance_tracker.errors import AuthError
from finance_tracker.models.record import UserIdentity
from finance_tracker.services.auth.interface import (
    AuthBackendInterface,
    SessionListener,
    Unsubscribe,
)
from finance_tracker.services.storage.supabase_store import SupabaseClient, backend_message


def _identity(session: Any) -> Optional[UserIdentity]:
    user = getattr(session, "user", None) if session is not None else None
    if user is None:
        return None
    return UserIdentity(id=str(user.id), email=getattr(user, "email", None))


class SupabaseAuthBackend(AuthBackendInterface):
    """Supabase implementation of the auth backend."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or SupabaseClient()

    @property
    def _auth(self):
        return self._client.connect().auth

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        try:
            response = await asyncio.to_thread(
                self._auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as e:
            raise AuthError(backend_message(e)) from e

        user = _identity(response.session) or _identity(response)
        if user is None:
            raise AuthError("Sign in did not return a user")
        return user

    async def sign_up(self, email: str, password: str) -> Optional[UserIdentity]:
        try:
            response = await asyncio.to_thread(
                self._auth.sign_up,
                {"email": email, "password": password},
            )
        except Exception as e:
            raise AuthError(backend_message(e)) from e

        # No session means the project requires email confirmation first.
        return _identity(response.session)

    async def sign_out(self) -> None:
        try:
            await asyncio.to_thread(self._auth.sign_out)
        except Exception as e:
            raise AuthError(backend_message(e)) from e

    async def get_session(self) -> Optional[UserIdentity]:
        try:
            session = await asyncio.to_thread(self._auth.get_session)
        except Exception as e:
            raise AuthError(backend_message(e)) from e
        return _identity(session)

    def on_session_change(self, listener: SessionListener) -> Unsubscribe:
        def handler(_event: Any, session: Any) -> None:
            listener(_identity(session))

        subscription = self._auth.on_auth_state_change(handler)
        return subscription.unsubscribe
