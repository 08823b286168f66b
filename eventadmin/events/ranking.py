"""
Subscriber ranking.

Ranks decide delivery order: higher ``service.ranking`` first, and among
equal rankings the lower ``service.id`` (the earlier registration) first.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any

from eventadmin.events.types import SERVICE_ID, SERVICE_RANKING


class Order(str, Enum):
    """Iteration order of the registry over ranks."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@total_ordering
@dataclass(frozen=True)
class ServiceRanking:
    """
    Comparable registration rank.

    The smaller rank is delivered first in ascending order. Ids drawn from
    a ServiceIdSequence are flagged as generated so they never collide
    with a service.id supplied by the caller.
    """

    ranking: int
    service_id: int
    generated: bool = False

    @property
    def sort_key(self) -> tuple[int, int, bool]:
        return (-self.ranking, self.service_id, self.generated)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ServiceRanking):
            return NotImplemented
        return self.sort_key < other.sort_key


def ranking_from_properties(properties: Mapping[str, Any]) -> int:
    """Read service.ranking; anything that is not an int counts as 0."""
    value = properties.get(SERVICE_RANKING)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return 0


class ServiceIdSequence:
    """Thread-safe source of fresh service ids."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


def rank_for(properties: Mapping[str, Any], ids: ServiceIdSequence) -> ServiceRanking:
    """
    Build the rank of a registration from its properties.

    Uses the caller supplied service.id when it is an int, otherwise
    draws a new one from ids.
    """
    ranking = ranking_from_properties(properties)
    service_id = properties.get(SERVICE_ID)
    if not isinstance(service_id, int) or isinstance(service_id, bool):
        return ServiceRanking(ranking, ids.next_id(), generated=True)
    return ServiceRanking(ranking, service_id)
