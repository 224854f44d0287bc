"""
Order Counter (TCP)

Line-based front door of the cafe. Each connection gets its own asyncio task
that runs the handshake (prompt, then the customer's name) and then reads one
command per line, forwarding it to the OrderService and writing the response
back. Pushed notifications share the same connection through a
StreamNotifier.

When a connection ends for any reason (``exit``, EOF, error, shutdown) the
customer's session is removed and its remaining drinks are discarded.
"""

import asyncio
import logging
from typing import Optional, Set

from barista import protocol
from barista.exceptions import BaristaError, DuplicateIdentity
from barista.protocol import CommandKind
from barista.services.notifications import StreamNotifier
from barista.services.orders import OrderService

logger = logging.getLogger(__name__)


class CafeServer:
    """asyncio TCP server speaking the order counter protocol."""

    def __init__(
        self,
        service: OrderService,
        host: str = "0.0.0.0",
        port: int = 8888,
        max_line_length: int = 1024,
        encoding: str = "utf-8",
    ) -> None:
        self.service = service
        self.host = host
        self.port = port
        self.max_line_length = max_line_length
        self.encoding = encoding
        self._server: Optional[asyncio.AbstractServer] = None
        self._connections: Set[asyncio.StreamWriter] = set()
        self._handlers: Set[asyncio.Task] = set()

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def connections(self) -> int:
        return len(self._connections)

    async def start(self) -> None:
        """Bind and start accepting; ``port`` is updated when 0 was requested."""
        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=self.max_line_length,
        )
        sockets = self._server.sockets or ()
        if sockets:
            self.port = sockets[0].getsockname()[1]
        logger.info(f"Order counter listening on {self.host}:{self.port}")

    def stop_accepting(self) -> None:
        if self._server is not None:
            self._server.close()
            logger.info("Order counter closed to new customers")

    async def close(self) -> None:
        """Stop accepting and hang up every open connection."""
        self.stop_accepting()
        for writer in list(self._connections):
            writer.close()
        if self._handlers:
            await asyncio.gather(*self._handlers, return_exceptions=True)
        if self._server is not None:
            await self._server.wait_closed()
            self._server = None

    # -------------------- per connection --------------------

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        self._connections.add(writer)
        task = asyncio.current_task()
        if task is not None:
            self._handlers.add(task)
        identity: Optional[str] = None
        logger.debug(f"Connection from {peer}")

        try:
            await self._send(writer, protocol.PROMPT)
            name = (await self._read_line(reader)).strip()
            if not name:
                logger.info(f"{peer} gave no name; closing")
                return

            try:
                self.service.connect(name, StreamNotifier(writer, self.encoding))
            except DuplicateIdentity as e:
                logger.warning(f"Refused {peer}: {e.message}")
                await self._send(writer, e.message)
                return
            identity = name

            await self._send(writer, protocol.greeting(identity))
            while True:
                line = await self._read_line(reader)
                if not line:
                    break
                if not await self._dispatch(identity, line, writer):
                    break

        except ValueError as e:
            # StreamReader.readline raises ValueError when a line exceeds the limit
            logger.warning(f"Dropping {identity or peer}: {e}")
        except ConnectionError as e:
            logger.debug(f"Connection lost for {identity or peer}: {e}")
        except Exception as e:
            logger.exception(f"Error handling client {identity or peer}: {e}")
        finally:
            if identity is not None:
                self.service.exit(identity)
            self._connections.discard(writer)
            self._handlers.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def _dispatch(self, identity: str, line: str, writer: asyncio.StreamWriter) -> bool:
        """Run one command. Returns False when the connection should end."""
        command = protocol.parse_command(line)

        try:
            if command.kind == CommandKind.ORDER:
                lines = protocol.parse_order_details(command.argument)
                self.service.place_order(identity, lines)
                await self._send(writer, protocol.order_received(identity, command.argument))
            elif command.kind == CommandKind.STATUS:
                counts = self.service.order_status(identity)
                await self._send(writer, *protocol.status_report(identity, counts))
            elif command.kind == CommandKind.COLLECT:
                self.service.collect(identity)
                await self._send(writer, protocol.collected(identity))
            elif command.kind == CommandKind.EXIT:
                await self._send(writer, protocol.FAREWELL)
                return False
            else:
                await self._send(writer, protocol.UNKNOWN_COMMAND)
        except BaristaError as e:
            await self._send(writer, e.message)
        return True

    async def _read_line(self, reader: asyncio.StreamReader) -> str:
        raw = await reader.readline()
        return raw.decode(self.encoding, errors="replace")

    async def _send(self, writer: asyncio.StreamWriter, *lines: str) -> None:
        writer.write("".join(f"{line}\n" for line in lines).encode(self.encoding))
        await writer.drain()
