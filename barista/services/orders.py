"""
Order Service

The single entry point the connection handler talks to. It validates
commands, is the only writer of the stage registry besides the scheduler,
answers status and collect queries, and turns "batch finished" events from
the scheduler into pushes through the session directory.

Order validation is all-or-nothing: a command with one bad part queues
nothing, even if earlier parts were fine.
"""

import itertools
import logging
from typing import Iterable, List, Tuple, Union

from pydantic import ValidationError

from barista.exceptions import (
    InvalidOrder,
    NoActiveOrder,
    NothingReady,
    OrderTooLarge,
    ProcessShutdown,
    UnknownCustomer,
)
from barista.models import OrderItem
from barista.schemas import CafeSnapshot, OrderLine, OrderRequest, StageCounts
from barista.services.notifications import BaseNotifier
from barista.services.registry import StageRegistry
from barista.services.scheduler import PreparationScheduler
from barista.services.sessions import Session, SessionDirectory

logger = logging.getLogger(__name__)

LineSpec = Union[OrderLine, Tuple[Union[int, str], str]]


class OrderService:
    """Facade over the registry, scheduler and session directory."""

    def __init__(
        self,
        registry: StageRegistry,
        scheduler: PreparationScheduler,
        sessions: SessionDirectory,
        max_items_per_order: int = 100,
    ) -> None:
        self.registry = registry
        self.scheduler = scheduler
        self.sessions = sessions
        self.max_items_per_order = max_items_per_order
        self._ids = itertools.count(1)
        scheduler.set_batch_ready_callback(self._on_batch_ready)

    # -------------------- sessions --------------------

    def connect(self, identity: str, notifier: BaseNotifier) -> Session:
        """Register a new customer; raises DuplicateIdentity for a name in use."""
        session = self.sessions.register(identity, notifier)
        self.log_state()
        return session

    def exit(self, owner: str) -> int:
        """
        End ``owner``'s visit: drop the session and every item it still owns.

        Abandoned drinks are discarded wherever they are, including the
        ones being prepared, whose slots are handed to the next waiting
        items. Safe to call more than once.
        """
        self.sessions.unregister(owner)
        removed = self.registry.remove_all_for(owner)
        self.scheduler.discard(owner)
        if removed:
            logger.info(f"{owner} left; {removed} item(s) abandoned")
        self.log_state()
        return removed

    # -------------------- commands --------------------

    def place_order(self, owner: str, lines: Iterable[LineSpec]) -> List[OrderItem]:
        """
        Queue an order for ``owner``.

        Args:
            owner: customer name
            lines: OrderLine models or ``(quantity, kind)`` pairs

        Returns:
            The created items, in queue order.

        Raises:
            UnknownCustomer: ``owner`` has no active session
            InvalidOrder: a quantity is not a positive integer, a kind is
                unknown, there are no lines, or the order holds more than
                ``max_items_per_order`` items; nothing is queued
            ProcessShutdown: the kitchen has stopped
        """
        if owner not in self.sessions:
            raise UnknownCustomer(owner)
        if self.scheduler.closed:
            raise ProcessShutdown()

        request = self._validate(lines)
        if request.total_items > self.max_items_per_order:
            raise OrderTooLarge(self.max_items_per_order)
        items = [
            OrderItem(id=next(self._ids), kind=line.kind, owner=owner)
            for line in request.lines
            for _ in range(line.quantity)
        ]
        self.registry.enqueue_many(items)
        self.sessions.adjust_pending(owner, len(items))
        logger.info(f"Order received for {owner} ({request.describe()})")

        self.scheduler.fill()
        self.log_state()
        return items

    def order_status(self, owner: str) -> StageCounts:
        """Per-stage counts for ``owner``; raises NoActiveOrder when all are zero."""
        counts = self.registry.counts_for(owner)
        if counts.total == 0:
            raise NoActiveOrder(owner)
        return counts

    def collect(self, owner: str) -> List[OrderItem]:
        """Hand over every ready item of ``owner``; raises NothingReady if there are none."""
        items = self.registry.collect_ready(owner)
        if not items:
            raise NothingReady()
        self.sessions.adjust_pending(owner, -len(items))
        logger.info(f"{owner} collected {len(items)} item(s)")
        self.log_state()
        return items

    # -------------------- observability --------------------

    def snapshot(self) -> CafeSnapshot:
        stages = self.registry.snapshot()
        return CafeSnapshot(
            clients=len(self.sessions),
            waiting_clients=self.sessions.waiting_clients(),
            waiting=stages.waiting,
            preparing=stages.preparing,
            ready=stages.ready,
            capacity=self.registry.capacity,
            in_flight=self.scheduler.in_flight,
            accepting_orders=not self.scheduler.closed,
        )

    def log_state(self) -> None:
        snap = self.snapshot()
        logger.info(
            f"Barista log │ clients={snap.clients} waiting_clients={snap.waiting_clients} "
            f"waiting={snap.waiting} preparing={snap.preparing}/{snap.capacity} ready={snap.ready}"
        )

    # -------------------- internals --------------------

    @staticmethod
    def _validate(lines: Iterable[LineSpec]) -> OrderRequest:
        try:
            parsed = [
                line if isinstance(line, OrderLine) else OrderLine(quantity=line[0], kind=line[1])
                for line in lines
            ]
            return OrderRequest(lines=parsed)
        except ValidationError as e:
            logger.debug(f"Rejected order: {e.errors()}")
            if any(err.get("loc", ())[-1:] == ("kind",) for err in e.errors()):
                raise InvalidOrder(
                    "Error! Invalid item type. Only 'tea' or 'coffee' are allowed."
                ) from e
            raise InvalidOrder() from e
        except (TypeError, IndexError) as e:
            raise InvalidOrder() from e

    def _on_batch_ready(self, owner: str) -> None:
        self.sessions.notify(owner, f"{owner} - Your order is ready to be collected. Thank you!")
