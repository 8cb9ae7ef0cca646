"""
In-memory auth backend.

Accounts live in a dict; sign-in and sign-out notify listeners
synchronously, the way the Supabase client does. Error messages match the
ones Supabase returns so the UI reads the same in demo mode.
"""

import asyncio
from typing import Optional
from uuid import uuid4

from finance_tracker.errors import AuthError
from finance_tracker.models.record import UserIdentity
from finance_tracker.services.auth.interface import (
    AuthBackendInterface,
    SessionListener,
    Unsubscribe,
)


class InMemoryAuthBackend(AuthBackendInterface):

    def __init__(self, confirm_email: bool = False):
        self._accounts: dict[str, tuple[str, UserIdentity]] = {}
        self._session: Optional[UserIdentity] = None
        self._listeners: list[SessionListener] = []
        self._confirm_email = confirm_email

    def add_account(self, email: str, password: str) -> UserIdentity:
        user = UserIdentity(id=str(uuid4()), email=email)
        self._accounts[email.lower()] = (password, user)
        return user

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def push_session(self, user: Optional[UserIdentity]) -> None:
        """Set the session and notify listeners (token refresh, other tab, ...)."""
        self._session = user
        for listener in list(self._listeners):
            listener(user)

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        await asyncio.sleep(0)
        account = self._accounts.get(email.lower())
        if account is None or account[0] != password:
            raise AuthError("Invalid login credentials")
        self.push_session(account[1])
        return account[1]

    async def sign_up(self, email: str, password: str) -> Optional[UserIdentity]:
        await asyncio.sleep(0)
        if email.lower() in self._accounts:
            raise AuthError("User already registered")
        user = self.add_account(email, password)
        if self._confirm_email:
            return None
        self.push_session(user)
        return user

    async def sign_out(self) -> None:
        await asyncio.sleep(0)
        self.push_session(None)

    async def get_session(self) -> Optional[UserIdentity]:
        return self._session

    def on_session_change(self, listener: SessionListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
