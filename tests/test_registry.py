"""
Stage Registry Tests

Covers FIFO claiming, the preparation capacity bound (including under
concurrent claims from many threads), and the per-owner queries and purges.
"""
import threading

import pytest

from barista.models import DrinkKind, OrderItem, Stage
from barista.services import StageRegistry


def make_items(owner, count, kind=DrinkKind.TEA, start=1):
    return [OrderItem(id=start + i, kind=kind, owner=owner) for i in range(count)]


class TestClaiming:

    def test_claims_follow_global_fifo_order(self):
        registry = StageRegistry(capacity=4)
        a1, b1, a2 = (
            OrderItem(1, DrinkKind.TEA, "alice"),
            OrderItem(2, DrinkKind.COFFEE, "bob"),
            OrderItem(3, DrinkKind.TEA, "alice"),
        )
        for item in (a1, b1, a2):
            registry.enqueue_waiting(item)

        assert [registry.claim_next() for _ in range(3)] == [a1, b1, a2]
        assert registry.items(Stage.PREPARING) == [a1, b1, a2]

    def test_claim_stops_at_capacity(self):
        registry = StageRegistry(capacity=2)
        registry.enqueue_many(make_items("alice", 3))

        assert registry.claim_next() is not None
        assert registry.claim_next() is not None
        assert registry.claim_next() is None
        assert registry.size(Stage.PREPARING) == 2
        assert registry.size(Stage.WAITING) == 1

    def test_claim_on_empty_waiting_returns_none(self, registry):
        assert registry.claim_next() is None

    def test_move_to_preparing_specific_item(self):
        registry = StageRegistry(capacity=1)
        first, second = make_items("alice", 2)
        registry.enqueue_many([first, second])

        assert registry.move_to_preparing(second) is True
        assert registry.move_to_preparing(first) is False  # full
        assert registry.move_to_preparing(second) is False  # not waiting any more
        assert registry.items(Stage.WAITING) == [first]

    def test_concurrent_claims_never_exceed_capacity(self):
        registry = StageRegistry(capacity=4)
        registry.enqueue_many(make_items("alice", 50))
        barrier = threading.Barrier(16)
        claimed = []
        claimed_lock = threading.Lock()

        def worker():
            barrier.wait()
            for _ in range(10):
                item = registry.claim_next()
                if item is not None:
                    with claimed_lock:
                        claimed.append(item)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(claimed) == 4
        assert registry.size(Stage.PREPARING) == 4
        assert registry.size(Stage.WAITING) == 46

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            StageRegistry(capacity=0)


class TestCompletion:

    def test_move_to_ready_reports_remaining_in_progress(self, registry):
        first, second = make_items("alice", 2)
        registry.enqueue_many([first, second])
        registry.claim_next()
        registry.claim_next()

        assert registry.move_to_ready(first) == 1
        assert registry.move_to_ready(second) == 0
        assert registry.counts_for("alice").ready == 2

    def test_remaining_count_includes_waiting_items(self):
        registry = StageRegistry(capacity=1)
        first, second = make_items("alice", 2)
        registry.enqueue_many([first, second])
        registry.claim_next()

        assert registry.move_to_ready(first) == 1

    def test_move_to_ready_of_purged_item_is_a_noop(self, registry):
        (item,) = make_items("alice", 1)
        registry.enqueue_waiting(item)
        registry.claim_next()
        registry.remove_all_for("alice")

        assert registry.move_to_ready(item) is None
        assert registry.snapshot().total == 0


class TestOwnerQueries:

    def test_counts_for_each_stage(self):
        registry = StageRegistry(capacity=2)
        items = make_items("alice", 4)
        registry.enqueue_many(items)
        registry.enqueue_many(make_items("bob", 2, start=10))
        registry.claim_next()
        registry.claim_next()
        registry.move_to_ready(items[0])

        counts = registry.counts_for("alice")
        assert (counts.waiting, counts.preparing, counts.ready) == (2, 1, 1)
        assert registry.count_for("bob", Stage.WAITING) == 2
        assert registry.count_for("bob", Stage.READY) == 0

    def test_collect_ready_takes_only_the_owners_items(self, registry):
        alice = make_items("alice", 2)
        bob = make_items("bob", 1, start=10)
        registry.enqueue_many(alice + bob)
        for item in alice + bob:
            registry.claim_next()
            registry.move_to_ready(item)

        assert registry.collect_ready("alice") == alice
        assert registry.collect_ready("alice") == []
        assert registry.items(Stage.READY) == bob

    def test_remove_all_for_purges_every_stage(self):
        registry = StageRegistry(capacity=2)
        alice = make_items("alice", 4)
        registry.enqueue_many(alice)
        registry.enqueue_waiting(OrderItem(99, DrinkKind.COFFEE, "bob"))
        registry.claim_next()
        registry.claim_next()
        registry.move_to_ready(alice[0])

        assert registry.remove_all_for("alice") == 4
        assert registry.counts_for("alice").total == 0
        assert registry.count_for("bob", Stage.WAITING) == 1
        assert registry.remove_all_for("alice") == 0
