"""
Session Directory

Maps each connected customer name to its notification channel and the
number of drinks it still has to collect. Names are unique among active
connections; a name becomes free again as soon as its session ends.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from barista.exceptions import DuplicateIdentity
from barista.services.notifications import BaseNotifier

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """State kept for one connected customer."""
    identity: str
    notifier: BaseNotifier
    pending: int = 0


class SessionDirectory:
    """Thread-safe registry of connected customers."""

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def register(self, identity: str, notifier: BaseNotifier) -> Session:
        """
        Add a session for ``identity``.

        Raises:
            DuplicateIdentity: if a session with that name is already active
        """
        with self._lock:
            if identity in self._sessions:
                raise DuplicateIdentity(identity)
            session = Session(identity=identity, notifier=notifier)
            self._sessions[identity] = session
        logger.info(f"Session opened for {identity} ({notifier.channel_name})")
        return session

    def unregister(self, identity: str) -> Optional[Session]:
        """Remove the session for ``identity``; a no-op if there is none."""
        with self._lock:
            session = self._sessions.pop(identity, None)
        if session is not None:
            session.notifier.close()
            logger.info(f"Session closed for {identity}")
        return session

    def notify(self, identity: str, message: str) -> bool:
        """
        Best-effort push to ``identity``.

        Returns False, without raising, when the customer is gone or its
        channel is closed.
        """
        with self._lock:
            session = self._sessions.get(identity)
        if session is None or session.notifier.is_closed:
            logger.debug(f"Notification for {identity} dropped (not connected)")
            return False
        result = session.notifier.deliver(message)
        if not result.success:
            logger.debug(
                f"Notification for {identity} dropped on {session.notifier.channel_name}: "
                f"{result.error_message}"
            )
        return result.success

    def adjust_pending(self, identity: str, delta: int) -> int:
        """Change the uncollected-item count of a session; returns the new value."""
        with self._lock:
            session = self._sessions.get(identity)
            if session is None:
                return 0
            session.pending = max(0, session.pending + delta)
            return session.pending

    def get(self, identity: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(identity)

    def waiting_clients(self) -> int:
        """Number of sessions that still have drinks to collect."""
        with self._lock:
            return sum(1 for session in self._sessions.values() if session.pending > 0)

    def close_all(self) -> None:
        """Close every notifier and forget all sessions (shutdown)."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.notifier.close()

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
