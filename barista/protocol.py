"""
Order Counter Text Protocol

One command per line, case-insensitive:

    order <qty> <kind> [and <qty> <kind>]*
    order status
    collect
    exit

Responses are one or more plain lines. Notifications the server pushes on
its own start with ``[NOTICE] `` (see services.notifications) and can arrive
between any two responses.
"""

import enum
from dataclasses import dataclass
from typing import List, Tuple, Union

from barista.exceptions import InvalidOrder
from barista.schemas import StageCounts

PROMPT = "Welcome! Please enter your name -->"
UNKNOWN_COMMAND = "User command unknown. Try again please!"
FAREWELL = "Exiting the cafe"
READY_TO_COLLECT = "Your order is ready to collect!"


class CommandKind(str, enum.Enum):
    ORDER = "order"
    STATUS = "order status"
    COLLECT = "collect"
    EXIT = "exit"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    argument: str = ""


def parse_command(line: str) -> Command:
    """Classify one client line. Never raises; unrecognised input is UNKNOWN."""
    tokens = line.strip().lower().split()
    if not tokens:
        return Command(CommandKind.UNKNOWN)
    if tokens == ["order", "status"]:
        return Command(CommandKind.STATUS)
    if tokens[0] == "order":
        return Command(CommandKind.ORDER, " ".join(tokens[1:]))
    if tokens == ["collect"]:
        return Command(CommandKind.COLLECT)
    if tokens == ["exit"]:
        return Command(CommandKind.EXIT)
    return Command(CommandKind.UNKNOWN, " ".join(tokens))


def parse_order_details(details: str) -> List[Tuple[Union[int, str], str]]:
    """
    Split ``"2 tea and 1 coffee"`` into ``[(2, "tea"), (1, "coffee")]``.

    Only the shape is checked here. A quantity made of plain ASCII digits
    becomes an int; anything else (``"1_0"``, ``"+2"``, ``"2.0"``) is passed
    through as text so the order service rejects it along with bad kinds.

    Raises:
        InvalidOrder: empty details or a part that is not exactly ``<qty> <kind>``
    """
    groups: List[List[str]] = [[]]
    for token in details.split():
        if token == "and":
            groups.append([])
        else:
            groups[-1].append(token)

    if any(len(group) != 2 for group in groups):
        raise InvalidOrder()
    return [(_quantity(group[0]), group[1]) for group in groups]


def _quantity(token: str) -> Union[int, str]:
    if token.isascii() and token.isdigit():
        try:
            return int(token)
        except ValueError:
            # longer than the interpreter allows for int conversion
            return token
    return token


# -------------------- responses --------------------

def greeting(identity: str) -> str:
    return f"Welcome {identity}! What would you like to order today?"


def order_received(identity: str, details: str) -> str:
    return f"Order received for {identity} ({details})"


def status_report(identity: str, counts: StageCounts) -> List[str]:
    lines = [
        f"Order status for {identity}:",
        f"--> {counts.waiting} items in the waiting area",
        f"--> {counts.preparing} items being prepared",
        f"--> {counts.ready} items in the tray",
    ]
    if counts.ready > 0:
        lines.append(READY_TO_COLLECT)
    return lines


def collected(identity: str) -> str:
    return f"Order collected! Thank you {identity} - Hope to see you again soon!"
