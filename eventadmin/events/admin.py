"""
Event admin: publish/subscribe dispatch over a subscriber registry.

Provides:
- Synchronous delivery in the publisher's thread (send_event)
- Asynchronous delivery on a worker pool (post_event)
- Ranking-ordered delivery with wildcard topic filters
- Per-subscriber fault isolation
- Explicit start/stop lifecycle

Example:
    admin = EventAdmin(EventAdminConfig(max_workers=4))
    admin.start()

    unsubscribe = admin.subscribe(on_order, topics="org/example/order/*")
    admin.send_event(Event("org/example/order/CREATED", {"id": 42}))
    admin.post_event(Event("org/example/order/SHIPPED", {"id": 42}))

    unsubscribe()
    admin.stop()
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from eventadmin.events.config import EventAdminConfig
from eventadmin.events.ranking import ServiceIdSequence, ServiceRanking, rank_for
from eventadmin.events.registry import Registration, SubscriberRegistry
from eventadmin.events.topics import TopicFilter
from eventadmin.events.types import (
    EVENT_TOPIC,
    SERVICE_ID,
    CallableHandler,
    Event,
    EventHandler,
)
from eventadmin.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Types & Enums
# =============================================================================


class BusState(str, Enum):
    """Lifecycle state of the event admin."""

    STOPPED = "stopped"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass
class DispatchStats:
    """Delivery counters."""

    sent: int = 0
    posted: int = 0
    dropped: int = 0
    delivered: int = 0
    failed: int = 0


# =============================================================================
# Event Admin
# =============================================================================


class EventAdmin:
    """
    In-process event admin.

    Subscribers are delivered in rank order. A failing subscriber is
    logged and skipped; nothing raised by subscriber code reaches the
    publisher. post_event is best effort: when the admin is not running
    or the pending queue is full the event is dropped.
    """

    def __init__(self, config: EventAdminConfig | None = None):
        """
        Initialize event admin.

        Args:
            config: Delivery configuration
        """
        self.config = config or EventAdminConfig()
        self._registry = SubscriberRegistry(self.config.order)
        self._ids = ServiceIdSequence()

        # Registrations made through on_subscriber_added
        self._bindings: dict[tuple[int, int | None], Registration] = {}
        self._bindings_lock = threading.Lock()

        # Lifecycle
        self._state = BusState.STOPPED
        self._state_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._pending: threading.Semaphore | None = None
        self._cancelled = threading.Event()

        self._stats = DispatchStats()
        self._stats_lock = threading.Lock()

    @property
    def state(self) -> BusState:
        with self._state_lock:
            return self._state

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Create the worker pool and start accepting events."""
        with self._state_lock:
            if self._state is BusState.RUNNING:
                return
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix=self.config.thread_name_prefix,
            )
            self._pending = (
                threading.Semaphore(self.config.max_pending)
                if self.config.bounded
                else None
            )
            self._cancelled = threading.Event()
            self._state = BusState.RUNNING

        logger.info(
            "event_admin_started",
            max_workers=self.config.max_workers,
            max_pending=self.config.max_pending,
        )

    def stop(self) -> None:
        """
        Stop accepting events and cancel pending async deliveries.

        Queued post_event tasks are cancelled; running ones stop before
        their next delivery. send_event calls already in progress finish.
        """
        with self._state_lock:
            if self._state is not BusState.RUNNING:
                return
            self._state = BusState.STOPPING
            executor, self._executor = self._executor, None
            self._pending = None
            self._cancelled.set()

        logger.info("event_admin_stopping")
        if executor is not None:
            executor.shutdown(wait=self.config.shutdown_wait, cancel_futures=True)

        with self._state_lock:
            # start() may have run again while the old pool shut down
            if self._state is BusState.STOPPING:
                self._state = BusState.STOPPED
        logger.info("event_admin_stopped")

    def __enter__(self) -> EventAdmin:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    def on_subscriber_added(
        self,
        subscriber: EventHandler,
        properties: Mapping[str, Any] | None = None,
    ) -> Registration:
        """
        Bind a subscriber announced by the host lifecycle.

        Args:
            subscriber: Object with a handle_event(event) method
            properties: service.ranking, service.id and event.topics

        Returns:
            The registration

        Raises:
            InvalidFilterError: If event.topics is malformed
            DuplicateRankError: If service.id and service.ranking belong to
                another registration; an earlier binding of the subscriber stays
        """
        properties = properties or {}
        topic_filter = TopicFilter.from_value(properties.get(EVENT_TOPIC))
        key = self._binding_key(subscriber, properties)
        rank = rank_for(properties, self._ids)

        with self._bindings_lock:
            # Adding a bound subscriber again replaces its registration
            registration = self._registry.replace(
                self._bindings.get(key), subscriber, rank, topic_filter
            )
            self._bindings[key] = registration
        return registration

    def on_subscriber_removed(
        self,
        subscriber: EventHandler,
        properties: Mapping[str, Any] | None = None,
    ) -> bool:
        """
        Unbind a subscriber. Unknown or already removed subscribers are ignored.

        Returns:
            True if a registration was removed
        """
        key = self._binding_key(subscriber, properties or {})
        with self._bindings_lock:
            registration = self._bindings.pop(key, None)
            if registration is None:
                return False
            return self._registry.unregister(registration)

    @staticmethod
    def _binding_key(
        subscriber: EventHandler, properties: Mapping[str, Any]
    ) -> tuple[int, int | None]:
        service_id = properties.get(SERVICE_ID)
        if not isinstance(service_id, int) or isinstance(service_id, bool):
            service_id = None
        return (id(subscriber), service_id)

    def subscribe(
        self,
        handler: EventHandler | Callable[[Event], Any],
        topics: str | list[str] | tuple[str, ...] | None = None,
        ranking: int = 0,
    ) -> Callable[[], None]:
        """
        Subscribe a handler directly.

        Args:
            handler: Function or object with handle_event(event)
            topics: Topic pattern(s) (supports * wildcard), None for all
            ranking: Higher rankings are delivered first

        Returns:
            Unsubscribe function

        Examples:
            admin.subscribe(handler, "org/example/order/CREATED")
            admin.subscribe(handler, "org/example/*", ranking=100)
            admin.subscribe(audit_handler)
        """
        subscriber = handler if isinstance(handler, EventHandler) else CallableHandler(handler)
        registration = self._registry.register(
            subscriber,
            ServiceRanking(ranking, self._ids.next_id(), generated=True),
            TopicFilter.from_value(topics),
        )

        def unsubscribe():
            self._registry.unregister(registration)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def send_event(self, event: Event) -> bool:
        """
        Deliver an event synchronously in the calling thread.

        Returns:
            True if the event was dispatched, False if the admin is not running
        """
        if self.state is not BusState.RUNNING:
            logger.warning("event_send_rejected", topic=event.topic, state=self.state.value)
            return False

        self._count(sent=1)
        self._distribute(event)
        return True

    def post_event(self, event: Event) -> bool:
        """
        Queue an event for delivery on the worker pool.

        Returns:
            True if accepted, False if dropped
        """
        reason = None
        with self._state_lock:
            if self._state is not BusState.RUNNING:
                reason = "not_running"
            elif self._pending is not None and not self._pending.acquire(blocking=False):
                reason = "saturated"
            else:
                future = self._executor.submit(self._distribute, event, self._cancelled)
                if self._pending is not None:
                    future.add_done_callback(lambda _f, pending=self._pending: pending.release())

        if reason is not None:
            self._count(dropped=1)
            logger.debug("event_post_dropped", topic=event.topic, reason=reason)
            return False

        self._count(posted=1)
        logger.debug("event_posted", topic=event.topic)
        return True

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _distribute(self, event: Event, cancelled: threading.Event | None = None) -> None:
        """Deliver to every matching subscriber of a registry snapshot."""
        logger.debug("event_dispatching", topic=event.topic)
        delivered = failed = 0

        for registration in self._registry.snapshot():
            if cancelled is not None and cancelled.is_set():
                logger.debug("event_dispatch_cancelled", topic=event.topic)
                break
            if not registration.matches(event):
                continue

            logger.debug("event_delivering", topic=event.topic, handler=registration.name)
            try:
                registration.subscriber.handle_event(event)
                delivered += 1
            except Exception:
                failed += 1
                logger.exception(
                    "event_handler_error",
                    topic=event.topic,
                    handler=registration.name,
                    properties=dict(event.properties),
                )

        self._count(delivered=delivered, failed=failed)
        logger.debug(
            "event_dispatched",
            topic=event.topic,
            delivered=delivered,
            failed=failed,
        )

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def _count(self, **increments: int) -> None:
        with self._stats_lock:
            for name, value in increments.items():
                setattr(self._stats, name, getattr(self._stats, name) + value)

    def get_stats(self) -> dict[str, Any]:
        """Get event admin statistics."""
        with self._stats_lock:
            stats = asdict(self._stats)
        stats["subscribers"] = len(self._registry)
        stats["state"] = self.state.value
        return stats
