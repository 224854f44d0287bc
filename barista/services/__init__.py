"""
                        Services Module

Contains the order-pipeline engine:
    - registry: the three-stage item store (waiting / preparing / ready)
    - scheduler: bounded-concurrency preparation of waiting items
    - sessions: connected customers and their notification channels
    - orders: the command facade used by the connection handler
"""

from barista.services.orders import OrderService
from barista.services.registry import StageRegistry
from barista.services.scheduler import PreparationScheduler
from barista.services.sessions import Session, SessionDirectory

__all__ = [
    "OrderService",
    "StageRegistry",
    "PreparationScheduler",
    "Session",
    "SessionDirectory",
]
