"""
Event value type and subscriber protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

# =============================================================================
# Registration property names
# =============================================================================

EVENT_TOPIC = "event.topics"
SERVICE_RANKING = "service.ranking"
SERVICE_ID = "service.id"


# =============================================================================
# Event Data Class
# =============================================================================


@dataclass(frozen=True)
class Event:
    """
    Immutable event delivered to subscribers.

    Attributes:
        topic: Event topic (e.g., "org/example/order/CREATED")
        properties: Read-only event attributes
    """

    topic: str | None
    properties: Mapping[str, Any] = field(default_factory=dict)

    # Properties are an unhashable mapping
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self):
        # Private copy so later changes to the caller's dict are not visible
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def get_property(self, name: str, default: Any = None) -> Any:
        """Return an event attribute, or default when absent."""
        return self.properties.get(name, default)

    def contains_property(self, name: str) -> bool:
        return name in self.properties

    def property_names(self) -> Iterator[str]:
        return iter(self.properties)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "topic": self.topic,
            "properties": dict(self.properties),
        }


# =============================================================================
# Subscriber Protocol
# =============================================================================


@runtime_checkable
class EventHandler(Protocol):
    """Anything that can receive events."""

    def handle_event(self, event: Event) -> Any: ...


class CallableHandler:
    """Adapts a plain function to the EventHandler protocol."""

    def __init__(self, func: Callable[[Event], Any]):
        self.func = func

    def handle_event(self, event: Event) -> Any:
        return self.func(event)

    def __repr__(self) -> str:
        return f"CallableHandler({self.func!r})"
