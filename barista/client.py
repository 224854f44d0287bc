"""
Interactive Order Counter Client

Connects to the cafe, prints everything the server sends (responses and
``[NOTICE]`` pushes alike) from a background task, and forwards the user's
commands. Obviously invalid commands are rejected locally.

Run: barista-client --host localhost --port 8888
"""

import argparse
import asyncio
import sys
from typing import Optional

from barista.core.config import get_settings

LOCAL_COMMANDS = ("order status", "collect", "exit")


def is_valid_command(command: str) -> bool:
    """True for commands worth sending to the server."""
    command = " ".join(command.strip().lower().split())
    return command in LOCAL_COMMANDS or command.startswith("order ")


async def _listen(reader: asyncio.StreamReader) -> None:
    while True:
        line = await reader.readline()
        if not line:
            print("Connection closed by server!")
            return
        print(line.decode("utf-8", errors="replace").rstrip("\n"))


async def _input() -> Optional[str]:
    loop = asyncio.get_running_loop()
    line = await loop.run_in_executor(None, sys.stdin.readline)
    return line if line else None


async def run_client(host: str, port: int) -> int:
    try:
        reader, writer = await asyncio.open_connection(host, port)
    except OSError as e:
        print(f"Error connecting to the server: {e}", file=sys.stderr)
        return 1

    listener = asyncio.create_task(_listen(reader))
    try:
        name = await _input()
        if name is None:
            return 0
        writer.write(name.encode("utf-8"))
        await writer.drain()

        while not listener.done():
            line = await _input()
            if line is None:
                break
            command = " ".join(line.strip().lower().split())
            if not is_valid_command(command):
                print("Invalid command. Please try again.")
                continue
            writer.write(f"{command}\n".encode("utf-8"))
            await writer.drain()
            if command == "exit":
                # let the farewell line arrive before hanging up
                await asyncio.wait([listener], timeout=2.0)
                break
    except ConnectionError:
        print("Connection closed by server!")
    finally:
        listener.cancel()
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass
        print("GoodBye!")
    return 0


def main(argv: Optional[list] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Barista order counter client")
    parser.add_argument("--host", default="localhost", help="Server host")
    parser.add_argument("--port", type=int, default=settings.cafe_port, help="Server port")
    args = parser.parse_args(argv)
    return asyncio.run(run_client(args.host, args.port))


if __name__ == "__main__":
    raise SystemExit(main())
