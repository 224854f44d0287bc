"""
Notification Channel Abstract Base Class

Defines the interface for pushing unsolicited lines to a connected client.
Pushes are best-effort: a channel that is closed, or that fails while
writing, reports the failure in its result instead of raising, because the
client has simply gone away.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

NOTICE_PREFIX = "[NOTICE] "


@dataclass
class NotificationResult:
    """Result from pushing one notification."""
    success: bool
    error_message: Optional[str] = None
    channel: str = "unknown"


class BaseNotifier(ABC):
    """Abstract base class for client notification channels."""

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Return the channel name."""
        pass

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the client side can no longer receive anything."""
        pass

    @abstractmethod
    def deliver(self, message: str) -> NotificationResult:
        """
        Push one message without blocking.

        Implementations tag the line with ``NOTICE_PREFIX`` so clients can
        tell pushes apart from command responses.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop accepting further notifications."""
        pass
