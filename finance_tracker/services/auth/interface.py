"""
Abstract Auth Interface

The auth backend owns the session. The tracker only asks it who is signed
in, asks it to sign users in or out, and listens for its session-change
notifications (see finance_tracker.session.SessionGate).
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from finance_tracker.models.record import UserIdentity


SessionListener = Callable[[Optional[UserIdentity]], None]
Unsubscribe = Callable[[], None]


class AuthBackendInterface(ABC):
    """
    Abstract interface for the auth backend.

    sign_in / sign_up raise AuthError with the backend's message verbatim.
    """

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> UserIdentity:
        """Sign in with email and password."""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> Optional[UserIdentity]:
        """
        Create an account.

        Returns:
            The signed-in user, or None when the backend requires email
            confirmation before the first session
        """
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    @abstractmethod
    async def get_session(self) -> Optional[UserIdentity]:
        """The user of the current session, if any."""
        pass

    @abstractmethod
    def on_session_change(self, listener: SessionListener) -> Unsubscribe:
        """
        Register a listener for session changes pushed by the backend.

        Returns:
            A callable that detaches the listener
        """
        pass
