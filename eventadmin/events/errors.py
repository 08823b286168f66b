"""
Event admin errors.
"""

from __future__ import annotations

from typing import Any


class EventAdminError(Exception):
    """Base class for event admin errors."""


class InvalidFilterError(EventAdminError):
    """Raised when a topic filter is neither absent, a string, nor a sequence of strings."""

    def __init__(self, value: Any, message: str | None = None):
        self.value = value
        self.message = message or f"Invalid topic filter: {value!r}"
        super().__init__(self.message)


class DuplicateRankError(EventAdminError):
    """Raised when a registration rank is already present in the registry."""

    def __init__(self, rank: Any):
        self.rank = rank
        self.message = f"Duplicate subscriber rank: {rank!r}"
        super().__init__(self.message)
