"""
Preparation Scheduler

Keeps up to ``registry.capacity`` drinks in preparation at once. Every event
that can add work or free a slot (a new order, a finished drink, a customer
leaving) calls ``fill()``, which claims WAITING items head-first until the
registry refuses. Each claim starts one asyncio task that waits out the
drink's preparation time and then moves it to READY.

Preparation tasks never hold the registry lock while sleeping. Shutdown stops
new claims, cancels every running task and waits a bounded grace period;
items whose preparation was cancelled stay in PREPARING because the process
is going away anyway.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from barista.models import DrinkKind, OrderItem
from barista.services.registry import StageRegistry

logger = logging.getLogger(__name__)

DurationFn = Callable[[DrinkKind], float]
SleepFn = Callable[[float], Awaitable[None]]
BatchReadyFn = Callable[[str], None]


class PreparationScheduler:
    """Drains WAITING into a bounded set of timed preparation tasks."""

    def __init__(
        self,
        registry: StageRegistry,
        duration_for: DurationFn,
        on_batch_ready: Optional[BatchReadyFn] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.registry = registry
        self._duration_for = duration_for
        self._on_batch_ready = on_batch_ready
        self._sleep = sleep
        self._tasks: Dict[OrderItem, "asyncio.Task[None]"] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def set_batch_ready_callback(self, callback: BatchReadyFn) -> None:
        self._on_batch_ready = callback

    # -------------------- claiming --------------------

    def fill(self) -> int:
        """
        Claim WAITING items until no slot is free or nothing is waiting.

        Must be called from the event loop thread. Returns how many
        preparations were started.
        """
        started = 0
        while not self._closed:
            item = self.registry.claim_next()
            if item is None:
                break
            task = asyncio.create_task(self._prepare(item), name=f"prepare-{item.id}")
            self._tasks[item] = task
            task.add_done_callback(lambda _t, claimed=item: self._tasks.pop(claimed, None))
            started += 1
            logger.debug(f"Started {item!r}")
        return started

    def discard(self, owner: str) -> int:
        """
        Cancel the preparations of an owner whose items were purged.

        The slots are already free in the registry; this stops the orphaned
        timers and backfills right away.
        """
        cancelled = 0
        for item, task in list(self._tasks.items()):
            if item.owner == owner and not task.done():
                task.cancel()
                cancelled += 1
        self.fill()
        return cancelled

    async def _prepare(self, item: OrderItem) -> None:
        seconds = self._duration_for(item.kind)
        try:
            await self._sleep(seconds)
        except asyncio.CancelledError:
            logger.debug(f"Preparation of {item!r} cancelled")
            raise

        remaining = self.registry.move_to_ready(item)
        if remaining is None:
            # owner left while the drink was brewing
            logger.debug(f"{item!r} finished after its owner left; dropped")
        else:
            logger.info(f"{item.kind.value.capitalize()} #{item.id} for {item.owner} is ready")
            if remaining == 0:
                self._notify_batch_ready(item.owner)
        self.fill()

    def _notify_batch_ready(self, owner: str) -> None:
        logger.info(f"Order for {owner} is ready to be collected")
        if self._on_batch_ready is None:
            return
        try:
            self._on_batch_ready(owner)
        except Exception:
            logger.exception(f"Ready callback failed for {owner}")

    # -------------------- lifecycle --------------------

    async def wait_idle(self) -> None:
        """Wait until no preparation is running (follow-up claims included)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self, grace: float = 1.0) -> int:
        """
        Stop claiming, cancel running preparations and wait up to ``grace`` seconds.

        Returns how many preparations were cancelled.
        """
        self._closed = True
        tasks = [task for task in self._tasks.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            _, pending = await asyncio.wait(tasks, timeout=grace)
            if pending:
                logger.warning(f"{len(pending)} preparation task(s) still running after {grace}s grace")
        logger.info(f"Scheduler stopped ({len(tasks)} preparation(s) cancelled)")
        return len(tasks)
