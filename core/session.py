"""
Session token provider for authenticated backend requests.
"""
from typing import Callable, List, Optional

from core.logging import get_logger
from domain.models import UserProfile


logger = get_logger(__name__)


class SessionStore:
    """Holds the bearer token and profile of the signed-in user."""

    def __init__(self, token: Optional[str] = None, profile: Optional[UserProfile] = None):
        self.token = token
        self.profile = profile
        self._listeners: List[Callable[[], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_token(self, token: str, profile: Optional[UserProfile] = None) -> None:
        self.token = token
        if profile is not None:
            self.profile = profile

    def on_invalidate(self, listener: Callable[[], None]) -> None:
        """Register a callback run when the session is invalidated."""
        self._listeners.append(listener)

    def invalidate(self) -> None:
        """Drop the token and profile, then notify listeners."""
        if self.token is None and self.profile is None:
            return
        logger.info("Session invalidated")
        self.token = None
        self.profile = None
        for listener in self._listeners:
            listener()


# Singleton instance
_session_store_instance: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """
    Get or create the process-wide SessionStore.

    Returns:
        SessionStore instance
    """
    global _session_store_instance

    if _session_store_instance is None:
        _session_store_instance = SessionStore()

    return _session_store_instance
