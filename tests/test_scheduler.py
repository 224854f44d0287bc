"""
Preparation Scheduler Tests

The kitchen clock fixture replaces asyncio.sleep, so every brew finishes
exactly when a test releases it.
"""
import asyncio

import pytest

from barista.models import DrinkKind, OrderItem, Stage
from barista.services import PreparationScheduler, StageRegistry
from conftest import COFFEE_SECONDS, TEA_SECONDS


def queue(registry, owner, count, kind=DrinkKind.COFFEE, start=1):
    items = [OrderItem(id=start + i, kind=kind, owner=owner) for i in range(count)]
    registry.enqueue_many(items)
    return items


@pytest.mark.asyncio
class TestFill:

    async def test_fill_claims_up_to_capacity(self, registry, scheduler, clock, settle):
        queue(registry, "alice", 6)

        assert scheduler.fill() == 4
        await settle()

        assert registry.size(Stage.PREPARING) == 4
        assert registry.size(Stage.WAITING) == 2
        assert scheduler.in_flight == 4
        assert clock.pending == 4

    async def test_brew_time_depends_on_kind(self, registry, scheduler, clock, settle):
        queue(registry, "alice", 1, kind=DrinkKind.TEA)
        queue(registry, "alice", 1, kind=DrinkKind.COFFEE, start=10)

        scheduler.fill()
        await settle()

        assert clock.durations == [TEA_SECONDS, COFFEE_SECONDS]
        assert TEA_SECONDS != COFFEE_SECONDS

    async def test_finished_slot_is_backfilled_immediately(self, registry, scheduler, clock, settle):
        items = queue(registry, "alice", 5)
        scheduler.fill()
        await settle()

        clock.release(1)
        await settle()

        assert registry.items(Stage.READY) == [items[0]]
        assert registry.items(Stage.PREPARING) == items[1:]
        assert registry.size(Stage.WAITING) == 0
        assert clock.pending == 4

    async def test_preparing_never_exceeds_capacity(self, registry, scheduler, clock, settle):
        queue(registry, "alice", 9)
        queue(registry, "bob", 7, start=100)
        scheduler.fill()

        while registry.snapshot().in_progress:
            await settle()
            assert registry.size(Stage.PREPARING) <= registry.capacity
            clock.release(2)

        assert registry.size(Stage.READY) == 16


@pytest.mark.asyncio
class TestBatchNotification:

    async def test_fires_once_when_owner_batch_completes(self, registry, scheduler, clock, settle, ready_owners):
        queue(registry, "alice", 3)
        scheduler.fill()
        await settle()

        clock.release(2)
        await settle()
        assert ready_owners == []

        clock.release()
        await settle()
        assert ready_owners == ["alice"]

    async def test_waits_for_items_still_waiting(self, settle, clock, ready_owners):
        registry = StageRegistry(capacity=1)
        scheduler = PreparationScheduler(
            registry, duration_for=lambda kind: 1.0, on_batch_ready=ready_owners.append, sleep=clock.sleep
        )
        queue(registry, "alice", 2)
        scheduler.fill()
        await settle()

        clock.release(1)
        await settle()
        assert ready_owners == []
        assert registry.count_for("alice", Stage.PREPARING) == 1

        clock.release(1)
        await settle()
        assert ready_owners == ["alice"]

    async def test_each_batch_is_notified(self, registry, scheduler, clock, settle, ready_owners):
        queue(registry, "alice", 1)
        queue(registry, "bob", 1, start=10)
        scheduler.fill()
        await settle()
        clock.release()
        await settle()

        queue(registry, "alice", 2, start=20)
        scheduler.fill()
        await settle()
        clock.release()
        await settle()

        assert sorted(ready_owners) == ["alice", "alice", "bob"]

    async def test_failing_callback_does_not_stop_the_kitchen(self, registry, clock, settle):
        def explode(owner):
            raise RuntimeError("boom")

        scheduler = PreparationScheduler(
            registry, duration_for=lambda kind: 1.0, on_batch_ready=explode, sleep=clock.sleep
        )
        queue(registry, "alice", 1)
        queue(registry, "bob", 4, start=10)
        scheduler.fill()
        await settle()

        clock.release(1)
        await settle()

        assert registry.count_for("alice", Stage.READY) == 1
        assert registry.size(Stage.PREPARING) == 4


@pytest.mark.asyncio
class TestCancellation:

    async def test_discard_cancels_owner_preparations_and_backfills(self, registry, scheduler, clock, settle):
        queue(registry, "alice", 3)
        bob = queue(registry, "bob", 2, start=10)
        scheduler.fill()
        await settle()

        registry.remove_all_for("alice")
        assert scheduler.discard("alice") == 3
        await settle()

        assert registry.items(Stage.PREPARING) == bob
        assert scheduler.in_flight == 2

    async def test_shutdown_cancels_in_flight_and_stops_claiming(self, registry, scheduler, clock, settle):
        queue(registry, "alice", 6)
        scheduler.fill()
        await settle()

        cancelled = await scheduler.shutdown(grace=0.5)

        assert cancelled == 4
        assert scheduler.closed
        assert scheduler.in_flight == 0
        # in-flight items are left where they were
        assert registry.size(Stage.PREPARING) == 4
        assert scheduler.fill() == 0
        assert registry.size(Stage.WAITING) == 2

    async def test_real_sleep_runs_to_completion(self, ready_owners):
        registry = StageRegistry(capacity=2)
        scheduler = PreparationScheduler(
            registry, duration_for=lambda kind: 0, on_batch_ready=ready_owners.append
        )
        queue(registry, "alice", 5)
        scheduler.fill()

        await asyncio.wait_for(scheduler.wait_idle(), timeout=5)

        assert registry.size(Stage.READY) == 5
        assert ready_owners == ["alice"]
