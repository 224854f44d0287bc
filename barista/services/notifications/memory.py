"""
In-Memory Notification Channel

Records pushed notifications instead of sending them anywhere. Used by the
development tooling and the test-suite to observe exactly what a client
would have received.

Version: 1.0.0
"""

import logging
from typing import List

from barista.services.notifications.base import (
    NOTICE_PREFIX,
    BaseNotifier,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class MemoryNotifier(BaseNotifier):
    """Notifier that keeps every delivered line in ``messages``."""

    def __init__(self) -> None:
        self.messages: List[str] = []
        self._closed = False

    @property
    def channel_name(self) -> str:
        return "memory"

    @property
    def is_closed(self) -> bool:
        return self._closed

    def deliver(self, message: str) -> NotificationResult:
        if self._closed:
            return NotificationResult(
                success=False,
                error_message="Channel closed",
                channel="memory"
            )
        self.messages.append(f"{NOTICE_PREFIX}{message}")
        logger.debug(f"Memory notification recorded: {message}")
        return NotificationResult(success=True, channel="memory")

    def close(self) -> None:
        self._closed = True
