import asyncio
from typing import List, Tuple

import pytest

from barista.models import DrinkKind
from barista.services import OrderService, PreparationScheduler, SessionDirectory, StageRegistry

TEA_SECONDS = 3.0
COFFEE_SECONDS = 4.5


class KitchenClock:
    """
    Stand-in for ``asyncio.sleep`` that only wakes a brewing task when the
    test says so. Sleeps are released oldest first.
    """

    def __init__(self) -> None:
        self.sleeps: List[Tuple[float, asyncio.Future]] = []

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self.sleeps.append((seconds, future))
        await future

    @property
    def durations(self) -> List[float]:
        return [seconds for seconds, _ in self.sleeps]

    @property
    def pending(self) -> int:
        return sum(1 for _, future in self.sleeps if not future.done())

    def release(self, count: int = None) -> int:
        """Finish ``count`` pending sleeps (all of them by default)."""
        released = 0
        for _, future in self.sleeps:
            if count is not None and released >= count:
                break
            if not future.done():
                future.set_result(None)
                released += 1
        return released


def brew_seconds(kind: DrinkKind) -> float:
    return TEA_SECONDS if kind == DrinkKind.TEA else COFFEE_SECONDS


@pytest.fixture()
def clock():
    return KitchenClock()


@pytest.fixture()
def settle():
    """Let the event loop run every task that is ready to make progress."""
    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)
    return _settle


@pytest.fixture()
def registry():
    return StageRegistry(capacity=4)


@pytest.fixture()
def sessions():
    return SessionDirectory()


@pytest.fixture()
def ready_owners():
    return []


@pytest.fixture()
def scheduler(registry, clock, ready_owners):
    return PreparationScheduler(
        registry,
        duration_for=brew_seconds,
        on_batch_ready=ready_owners.append,
        sleep=clock.sleep,
    )


@pytest.fixture()
def service(registry, scheduler, sessions):
    return OrderService(registry, scheduler, sessions)
