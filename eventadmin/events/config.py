"""
Event admin configuration.

Values can be set directly or loaded from EVENTADMIN_* environment
variables:

    EVENTADMIN_MAX_WORKERS=4
    EVENTADMIN_MAX_PENDING=1024
    EVENTADMIN_ORDER=descending
    EVENTADMIN_THREAD_PREFIX=eventadmin
    EVENTADMIN_SHUTDOWN_WAIT=1
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from eventadmin.events.ranking import Order

ENV_PREFIX = "EVENTADMIN_"

_TRUE_VALUES = ("1", "true", "True", "yes")


def _optional_int(env: Mapping[str, str], key: str) -> int | None:
    raw = env.get(ENV_PREFIX + key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}") from None


@dataclass
class EventAdminConfig:
    """
    Configuration for event delivery.

    Args:
        max_workers: Worker threads for post_event (None = executor default)
        max_pending: Max accepted but unfinished async tasks (None = unbounded)
        order: Registry iteration order over ranks
        thread_name_prefix: Name prefix of worker threads
        shutdown_wait: Whether stop() waits for running async tasks
    """

    max_workers: int | None = None
    max_pending: int | None = None
    order: Order = Order.ASCENDING
    thread_name_prefix: str = "eventadmin"
    shutdown_wait: bool = False

    def __post_init__(self):
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.max_pending is not None and self.max_pending < 1:
            raise ValueError("max_pending must be >= 1")
        self.order = Order(self.order)

    @property
    def bounded(self) -> bool:
        return self.max_pending is not None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EventAdminConfig:
        """Load configuration from environment variables."""
        env = os.environ if environ is None else environ
        order = env.get(ENV_PREFIX + "ORDER", Order.ASCENDING.value).strip().lower()
        return cls(
            max_workers=_optional_int(env, "MAX_WORKERS"),
            max_pending=_optional_int(env, "MAX_PENDING"),
            order=order,
            thread_name_prefix=env.get(ENV_PREFIX + "THREAD_PREFIX", "eventadmin"),
            shutdown_wait=env.get(ENV_PREFIX + "SHUTDOWN_WAIT", "") in _TRUE_VALUES,
        )
