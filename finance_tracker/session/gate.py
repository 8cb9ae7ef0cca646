"""
Session Gate

Holds the identity of the signed-in user. The cell is only written through
_set_user: by the handler of the auth backend's session-change
notifications, and by sign_in, sign_up and sign_out with the backend's
answer, so the gate is current even when no notification arrives. Writes
of an unchanged identity are dropped, so subscribers hear each change once.
Everything else reads the cell, and every mutation starts with
require_user().

The gate is a convenience for the UI. The store's row-level security is
what actually keeps users apart.
"""

from typing import Callable, Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.errors import AuthError
from finance_tracker.models.record import UserIdentity
from finance_tracker.services.auth import AuthBackendInterface


logger = structlog.get_logger(__name__)

SessionCallback = Callable[[Optional[UserIdentity]], None]


class SessionGate:
    """Current user cell with publish/subscribe."""

    def __init__(
        self,
        auth: AuthBackendInterface,
        audit_logger: Optional[AuditLogger] = None,
        min_password_length: int = 6,
    ):
        self._auth = auth
        self._audit_logger = audit_logger
        self._min_password_length = min_password_length
        self._user: Optional[UserIdentity] = None
        self._subscribers: dict[int, SessionCallback] = {}
        self._next_token = 0
        self._unsubscribe_backend: Optional[Callable[[], None]] = None
        self._started = False

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> Optional[UserIdentity]:
        """
        Read the current session once and subscribe to backend changes.

        Calling start() again is a no-op.
        """
        if self._started:
            return self._user
        self._started = True
        self._unsubscribe_backend = self._auth.on_session_change(self._on_session_change)
        try:
            user = await self._auth.get_session()
        except AuthError as e:
            logger.warning("session_lookup_failed", error=e.message)
            user = None
        self._set_user(user)
        return user

    def stop(self) -> None:
        """Detach from the backend. Subscribers are kept."""
        if self._unsubscribe_backend is not None:
            self._unsubscribe_backend()
            self._unsubscribe_backend = None
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def current_user(self) -> Optional[UserIdentity]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def require_user(self) -> UserIdentity:
        """
        Raises:
            AuthError: nobody is signed in
        """
        if self._user is None:
            raise AuthError("You need to sign in first")
        return self._user

    def subscribe(self, callback: SessionCallback) -> Callable[[], None]:
        """
        Register for session changes.

        Returns:
            A detach function. Calling it more than once is harmless.
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def detach() -> None:
            self._subscribers.pop(token, None)

        return detach

    def _on_session_change(self, user: Optional[UserIdentity]) -> None:
        if self._audit_logger:
            self._audit_logger.log_session_changed(user.id if user else None)
        self._set_user(user)

    def _set_user(self, user: Optional[UserIdentity]) -> None:
        if user == self._user:
            return
        self._user = user
        for callback in list(self._subscribers.values()):
            callback(user)

    # ------------------------------------------------------------------
    # actions
    # ------------------------------------------------------------------

    def _check_credentials(self, email: str, password: str) -> None:
        if not email or not email.strip():
            raise AuthError("Email is required")
        if len(password or "") < self._min_password_length:
            raise AuthError(
                f"Password must be at least {self._min_password_length} characters"
            )

    async def sign_in(self, email: str, password: str) -> UserIdentity:
        """
        Raises:
            AuthError: short password, or the backend's message verbatim
        """
        email = email.strip()
        self._check_credentials(email, password)
        try:
            user = await self._auth.sign_in(email, password)
        except AuthError as e:
            if self._audit_logger:
                self._audit_logger.log_auth_failed("Sign in", email, e.message)
            raise

        # The backend's notification normally got here first.
        self._set_user(user)
        if self._audit_logger:
            self._audit_logger.log_signed_in(user.id, user.email)
        return user

    async def sign_up(self, email: str, password: str) -> Optional[UserIdentity]:
        """
        Returns:
            The new user if the backend opened a session, None when the
            account must be confirmed by email first

        Raises:
            AuthError: short password, or the backend's message verbatim
        """
        email = email.strip()
        self._check_credentials(email, password)
        try:
            user = await self._auth.sign_up(email, password)
        except AuthError as e:
            if self._audit_logger:
                self._audit_logger.log_auth_failed("Sign up", email, e.message)
            raise

        if user is not None:
            self._set_user(user)
        if self._audit_logger:
            self._audit_logger.log_signed_up(email, user.id if user else None)
        return user

    async def sign_out(self) -> None:
        previous = self._user
        await self._auth.sign_out()
        self._set_user(None)
        if self._audit_logger:
            self._audit_logger.log_signed_out(previous.id if previous else None)
