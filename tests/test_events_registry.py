import threading

import pytest

from eventadmin.events import (
    DuplicateRankError,
    Event,
    Order,
    ServiceRanking,
    SubscriberRegistry,
    TopicFilter,
)


class Handler:
    def __init__(self, name):
        self.name = name

    def handle_event(self, event):
        pass


def names(registrations):
    return [r.subscriber.name for r in registrations]


def test_snapshot_in_rank_order_regardless_of_insert_order():
    registry = SubscriberRegistry()
    registry.register(Handler("c"), ServiceRanking(0, 3))
    registry.register(Handler("a"), ServiceRanking(10, 9))
    registry.register(Handler("b"), ServiceRanking(0, 1))
    assert names(registry.snapshot()) == ["a", "b", "c"]


def test_descending_order_reverses_snapshot():
    registry = SubscriberRegistry(Order.DESCENDING)
    registry.register(Handler("a"), ServiceRanking(10, 1))
    registry.register(Handler("b"), ServiceRanking(0, 2))
    assert names(registry.snapshot()) == ["b", "a"]


def test_duplicate_rank_rejected():
    registry = SubscriberRegistry()
    registry.register(Handler("a"), ServiceRanking(0, 1))
    with pytest.raises(DuplicateRankError) as exc_info:
        registry.register(Handler("b"), ServiceRanking(0, 1))
    assert exc_info.value.rank == ServiceRanking(0, 1)
    assert names(registry.snapshot()) == ["a"]


def test_unregister_is_idempotent():
    registry = SubscriberRegistry()
    handle = registry.register(Handler("a"), ServiceRanking(0, 1))
    other = registry.register(Handler("b"), ServiceRanking(0, 2))

    assert registry.unregister(handle) is True
    assert registry.unregister(handle) is False
    assert handle not in registry
    assert other in registry
    assert len(registry) == 1


def test_stale_handle_does_not_remove_new_registration():
    registry = SubscriberRegistry()
    old = registry.register(Handler("old"), ServiceRanking(0, 1))
    registry.unregister(old)
    new = registry.register(Handler("new"), ServiceRanking(0, 1))

    assert registry.unregister(old) is False
    assert new in registry


def test_snapshot_is_isolated_from_later_mutation():
    registry = SubscriberRegistry()
    handle = registry.register(Handler("a"), ServiceRanking(0, 1))
    snapshot = registry.snapshot()

    registry.unregister(handle)
    registry.register(Handler("b"), ServiceRanking(0, 2))

    assert names(snapshot) == ["a"]
    assert names(registry.snapshot()) == ["b"]


def test_registration_matches_through_filter():
    registry = SubscriberRegistry()
    handle = registry.register(Handler("a"), ServiceRanking(0, 1), TopicFilter.from_value("a/*"))
    assert handle.matches(Event("a/b"))
    assert not handle.matches(Event("b/a"))
    assert handle.name == "Handler"


def test_clear():
    registry = SubscriberRegistry()
    registry.register(Handler("a"), ServiceRanking(0, 1))
    registry.clear()
    assert registry.snapshot() == ()


def test_concurrent_register_and_unregister():
    registry = SubscriberRegistry()
    per_thread = 200

    def worker(offset):
        for i in range(per_thread):
            handle = registry.register(Handler(f"{offset}-{i}"), ServiceRanking(i % 7, offset * per_thread + i))
            if i % 2:
                registry.unregister(handle)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = registry.snapshot()
    assert len(snapshot) == 8 * per_thread // 2
    ranks = [r.rank for r in snapshot]
    assert ranks == sorted(ranks)


def test_replace_swaps_in_place():
    registry = SubscriberRegistry()
    old = registry.register(Handler("old"), ServiceRanking(0, 1))
    new = registry.replace(old, Handler("new"), ServiceRanking(0, 1))

    assert old not in registry
    assert new in registry
    assert names(registry.snapshot()) == ["new"]


def test_replace_onto_taken_rank_keeps_previous():
    registry = SubscriberRegistry()
    mine = registry.register(Handler("mine"), ServiceRanking(0, 1))
    registry.register(Handler("other"), ServiceRanking(5, 1))

    with pytest.raises(DuplicateRankError):
        registry.replace(mine, Handler("mine-v2"), ServiceRanking(5, 1))

    assert mine in registry
    assert names(registry.snapshot()) == ["other", "mine"]


def test_replace_without_previous_registers():
    registry = SubscriberRegistry()
    handle = registry.replace(None, Handler("a"), ServiceRanking(0, 1))
    assert handle in registry
