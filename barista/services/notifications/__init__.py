"""
Notification Channels

Each connected client gets one notifier: StreamNotifier for real TCP
connections, MemoryNotifier for development tooling and tests.

Version: 1.0.0
"""

from barista.services.notifications.base import (
    NOTICE_PREFIX,
    BaseNotifier,
    NotificationResult,
)
from barista.services.notifications.memory import MemoryNotifier
from barista.services.notifications.stream import StreamNotifier

__all__ = [
    "NOTICE_PREFIX",
    "BaseNotifier",
    "NotificationResult",
    "MemoryNotifier",
    "StreamNotifier",
]
