"""
Thread-safe subscriber registry.

Keeps registrations sorted by rank. Dispatch works on snapshots so that
subscriber code never runs while the registry lock is held.
"""

from __future__ import annotations

import bisect
import threading
from dataclasses import dataclass, field
from typing import Any

from eventadmin.events.errors import DuplicateRankError
from eventadmin.events.ranking import Order, ServiceRanking
from eventadmin.events.topics import TopicFilter
from eventadmin.events.types import CallableHandler, Event, EventHandler
from eventadmin.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class Registration:
    """A subscriber bound to a rank and a topic filter.

    Returned by register() and used as the handle for unregister().
    """

    subscriber: EventHandler
    rank: ServiceRanking
    topic_filter: TopicFilter = field(default_factory=TopicFilter)

    def matches(self, event: Event) -> bool:
        return self.topic_filter.matches(event.topic)

    @property
    def name(self) -> str:
        return describe_subscriber(self.subscriber)


def describe_subscriber(subscriber: Any) -> str:
    """Readable subscriber identity for log records."""
    target = subscriber.func if isinstance(subscriber, CallableHandler) else subscriber
    name = getattr(target, "__qualname__", None)
    if name is None:
        name = type(target).__qualname__
    return name


class SubscriberRegistry:
    """
    Ordered registry of subscriber registrations.

    Example:
        registry = SubscriberRegistry()
        handle = registry.register(handler, ServiceRanking(10, 1), TopicFilter())
        for registration in registry.snapshot():
            ...
        registry.unregister(handle)
    """

    def __init__(self, order: Order = Order.ASCENDING):
        """
        Initialize registry.

        Args:
            order: Snapshot order over ranks
        """
        self.order = Order(order)
        self._ranks: list[ServiceRanking] = []
        self._entries: dict[ServiceRanking, Registration] = {}
        self._lock = threading.Lock()

    def register(
        self,
        subscriber: EventHandler,
        rank: ServiceRanking,
        topic_filter: TopicFilter | None = None,
    ) -> Registration:
        """
        Add a subscriber.

        Raises:
            DuplicateRankError: If the rank is already registered
        """
        registration = Registration(subscriber, rank, topic_filter or TopicFilter())
        with self._lock:
            if rank in self._entries:
                raise DuplicateRankError(rank)
            bisect.insort(self._ranks, rank)
            self._entries[rank] = registration

        logger.debug(
            "subscriber_registered",
            handler=registration.name,
            ranking=rank.ranking,
            service_id=rank.service_id,
            topics=list(registration.topic_filter.patterns),
        )
        return registration

    def replace(
        self,
        previous: Registration | None,
        subscriber: EventHandler,
        rank: ServiceRanking,
        topic_filter: TopicFilter | None = None,
    ) -> Registration:
        """
        Swap a registration for a new one in a single step.

        The rank may equal the rank of previous. When the new rank is taken
        by any other registration nothing changes and previous stays.

        Raises:
            DuplicateRankError: If the rank is held by another registration
        """
        registration = Registration(subscriber, rank, topic_filter or TopicFilter())
        with self._lock:
            holder = self._entries.get(rank)
            if holder is not None and holder is not previous:
                raise DuplicateRankError(rank)
            if previous is not None and self._entries.get(previous.rank) is previous:
                del self._entries[previous.rank]
                self._ranks.pop(bisect.bisect_left(self._ranks, previous.rank))
            bisect.insort(self._ranks, rank)
            self._entries[rank] = registration

        logger.debug(
            "subscriber_replaced",
            handler=registration.name,
            ranking=rank.ranking,
            service_id=rank.service_id,
            topics=list(registration.topic_filter.patterns),
        )
        return registration

    def unregister(self, handle: Registration) -> bool:
        """
        Remove a registration.

        Returns:
            False if it was already removed
        """
        with self._lock:
            if self._entries.get(handle.rank) is not handle:
                return False
            del self._entries[handle.rank]
            self._ranks.pop(bisect.bisect_left(self._ranks, handle.rank))

        logger.debug(
            "subscriber_unregistered",
            handler=handle.name,
            service_id=handle.rank.service_id,
        )
        return True

    def snapshot(self) -> tuple[Registration, ...]:
        """Point-in-time copy of all registrations in iteration order."""
        with self._lock:
            entries = tuple(self._entries[rank] for rank in self._ranks)
        if self.order is Order.DESCENDING:
            return entries[::-1]
        return entries

    def clear(self) -> None:
        with self._lock:
            self._ranks.clear()
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, handle: object) -> bool:
        if not isinstance(handle, Registration):
            return False
        with self._lock:
            return self._entries.get(handle.rank) is handle
