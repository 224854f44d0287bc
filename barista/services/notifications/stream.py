"""
Stream Notification Channel

Production channel: writes notifications straight onto the client's TCP
connection, interleaved with command responses. ``StreamWriter.write`` only
buffers, so delivering never waits on a slow client.

Version: 1.0.0
"""

import asyncio
import logging

from barista.services.notifications.base import (
    NOTICE_PREFIX,
    BaseNotifier,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class StreamNotifier(BaseNotifier):
    """Pushes tagged lines onto an ``asyncio.StreamWriter``."""

    def __init__(self, writer: asyncio.StreamWriter, encoding: str = "utf-8"):
        self.writer = writer
        self.encoding = encoding
        self._closed = False

    @property
    def channel_name(self) -> str:
        return "stream"

    @property
    def is_closed(self) -> bool:
        return self._closed or self.writer.is_closing()

    def deliver(self, message: str) -> NotificationResult:
        if self.is_closed:
            return NotificationResult(
                success=False,
                error_message="Connection closed",
                channel="stream"
            )

        try:
            self.writer.write(f"{NOTICE_PREFIX}{message}\n".encode(self.encoding))
        except (ConnectionError, RuntimeError) as e:
            logger.debug(f"Stream notification failed: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                channel="stream"
            )

        return NotificationResult(success=True, channel="stream")

    def close(self) -> None:
        self._closed = True
