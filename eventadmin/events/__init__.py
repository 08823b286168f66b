"""
Event admin module.

Provides topic-filtered, ranking-ordered publish/subscribe delivery
between components of one process.
"""

from eventadmin.events.admin import BusState, DispatchStats, EventAdmin
from eventadmin.events.config import EventAdminConfig
from eventadmin.events.errors import (
    DuplicateRankError,
    EventAdminError,
    InvalidFilterError,
)
from eventadmin.events.ranking import Order, ServiceRanking
from eventadmin.events.registry import Registration, SubscriberRegistry
from eventadmin.events.topics import TopicFilter, matches
from eventadmin.events.types import (
    EVENT_TOPIC,
    SERVICE_ID,
    SERVICE_RANKING,
    CallableHandler,
    Event,
    EventHandler,
)

__all__ = [
    "BusState",
    "CallableHandler",
    "DispatchStats",
    "DuplicateRankError",
    "EVENT_TOPIC",
    "Event",
    "EventAdmin",
    "EventAdminConfig",
    "EventAdminError",
    "EventHandler",
    "InvalidFilterError",
    "Order",
    "Registration",
    "SERVICE_ID",
    "SERVICE_RANKING",
    "ServiceRanking",
    "SubscriberRegistry",
    "TopicFilter",
    "matches",
]
