"""
Stage Registry

Holds every live order item in exactly one of three FIFO stages:

    WAITING   -> items accepted but not yet started
    PREPARING -> items occupying one of the limited preparation slots
    READY     -> finished items waiting on the counter for their owner

Thread safety:
    All public methods take ``self._lock`` for their whole body, so each call
    is one atomic step. The lock is never held across an ``await``; callers
    are plain synchronous methods that asyncio tasks (and FastAPI worker
    threads reading snapshots) invoke directly.

Capacity:
    ``len(PREPARING) <= capacity`` holds at every instant. The only way into
    PREPARING is ``claim_next`` / ``move_to_preparing``, both of which test
    the capacity and insert in the same critical section.
"""

import logging
import threading
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from barista.models import OrderItem, Stage
from barista.schemas import StageCounts

logger = logging.getLogger(__name__)


class StageRegistry:
    """Thread-safe three-stage item store with a bounded PREPARING stage."""

    def __init__(self, capacity: int = 4) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._stages: Dict[Stage, Deque[OrderItem]] = {
            Stage.WAITING: deque(),
            Stage.PREPARING: deque(),
            Stage.READY: deque(),
        }
        self._lock = threading.Lock()

    # -------------------- enqueue --------------------

    def enqueue_waiting(self, item: OrderItem) -> None:
        """Append one item to the tail of WAITING."""
        with self._lock:
            self._stages[Stage.WAITING].append(item)

    def enqueue_many(self, items: Iterable[OrderItem]) -> int:
        """
        Append a whole order to WAITING in one step.

        No claim can interleave between the items of one order, so a
        multi-drink order is either fully queued or not queued at all.
        """
        batch = list(items)
        with self._lock:
            self._stages[Stage.WAITING].extend(batch)
        return len(batch)

    # -------------------- transitions --------------------

    def claim_next(self) -> Optional[OrderItem]:
        """
        Move the head of WAITING into PREPARING if a slot is free.

        Returns the claimed item, or None when WAITING is empty or every
        slot is taken.
        """
        with self._lock:
            waiting = self._stages[Stage.WAITING]
            preparing = self._stages[Stage.PREPARING]
            if not waiting or len(preparing) >= self.capacity:
                return None
            item = waiting.popleft()
            preparing.append(item)
            return item

    def move_to_preparing(self, item: OrderItem) -> bool:
        """
        Move a specific WAITING item into PREPARING.

        Returns False, leaving the item where it is, when the item is not
        waiting or no slot is free.
        """
        with self._lock:
            preparing = self._stages[Stage.PREPARING]
            if len(preparing) >= self.capacity:
                return False
            try:
                self._stages[Stage.WAITING].remove(item)
            except ValueError:
                return False
            preparing.append(item)
            return True

    def move_to_ready(self, item: OrderItem) -> Optional[int]:
        """
        Move a finished item from PREPARING to READY.

        Returns:
            How many of the owner's items are still WAITING or PREPARING
            after the move, counted in the same critical section; 0 means
            this item completed the owner's batch. None if the item was no
            longer preparing (its owner left) and nothing moved.
        """
        with self._lock:
            try:
                self._stages[Stage.PREPARING].remove(item)
            except ValueError:
                return None
            self._stages[Stage.READY].append(item)
            return self._count(item.owner, Stage.WAITING) + self._count(item.owner, Stage.PREPARING)

    def collect_ready(self, owner: str) -> List[OrderItem]:
        """Remove and return every READY item belonging to ``owner``."""
        with self._lock:
            return self._drain(owner, Stage.READY)

    def remove_all_for(self, owner: str) -> int:
        """Drop every item of ``owner`` from every stage; returns how many were removed."""
        with self._lock:
            removed = sum(len(self._drain(owner, stage)) for stage in Stage)
        if removed:
            logger.debug(f"Purged {removed} item(s) for {owner}")
        return removed

    # -------------------- queries --------------------

    def count_for(self, owner: str, stage: Stage) -> int:
        """Number of ``owner``'s items in one stage."""
        with self._lock:
            return self._count(owner, stage)

    def counts_for(self, owner: str) -> StageCounts:
        """All three per-stage counts for ``owner`` from one consistent view."""
        with self._lock:
            return StageCounts(
                waiting=self._count(owner, Stage.WAITING),
                preparing=self._count(owner, Stage.PREPARING),
                ready=self._count(owner, Stage.READY),
            )

    def size(self, stage: Stage) -> int:
        with self._lock:
            return len(self._stages[stage])

    def snapshot(self) -> StageCounts:
        """Global stage sizes."""
        with self._lock:
            return StageCounts(
                waiting=len(self._stages[Stage.WAITING]),
                preparing=len(self._stages[Stage.PREPARING]),
                ready=len(self._stages[Stage.READY]),
            )

    def items(self, stage: Stage) -> List[OrderItem]:
        """Shallow copy of one stage, head first. For display and tests only."""
        with self._lock:
            return list(self._stages[stage])

    # -------------------- internals (lock held) --------------------

    def _count(self, owner: str, stage: Stage) -> int:
        return sum(1 for item in self._stages[stage] if item.owner == owner)

    def _drain(self, owner: str, stage: Stage) -> List[OrderItem]:
        queue = self._stages[stage]
        taken = [item for item in queue if item.owner == owner]
        if taken:
            kept = [item for item in queue if item.owner != owner]
            queue.clear()
            queue.extend(kept)
        return taken
