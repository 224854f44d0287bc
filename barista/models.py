"""
Domain Models

In-memory order items and the stages they move through. Nothing here is
persisted; an item lives from the moment its order is accepted until it is
collected or its owner leaves the cafe.

Version: 1.0.0
"""

import enum
from dataclasses import dataclass


class DrinkKind(str, enum.Enum):
    """Drinks the barista can prepare."""
    TEA = "tea"
    COFFEE = "coffee"


class Stage(str, enum.Enum):
    """
    Item workflow.

    WAITING -> PREPARING -> READY, then the item leaves the registry when it is
    collected or abandoned.
    """
    WAITING = "waiting"
    PREPARING = "preparing"
    READY = "ready"


@dataclass(frozen=True)
class OrderItem:
    """
    One drink for one customer.

    Items are immutable; which stage an item is in is tracked by the
    StageRegistry, never by the item itself.
    """
    id: int
    kind: DrinkKind
    owner: str

    def __repr__(self) -> str:
        return f"<OrderItem #{self.id} - {self.kind.value} - {self.owner}>"
