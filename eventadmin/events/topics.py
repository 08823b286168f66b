"""
Wildcard topic matching.

A pattern is a topic string where every ``*`` matches any run of
characters (including none). Everything else is literal, so a pattern
without ``*`` only matches the identical topic.

Example:
    topic_filter = TopicFilter.from_value(["org/example/*", "audit/LOGIN"])
    topic_filter.matches("org/example/order/CREATED")  # True
    matches("org/*/CREATED", "org/example/CREATED")      # True
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from eventadmin.events.errors import InvalidFilterError

WILDCARD = "*"

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard pattern into an anchored regular expression."""
    regex = ".*".join(re.escape(part) for part in pattern.split(WILDCARD))
    return re.compile(regex, re.DOTALL)


def matches(pattern: str, topic: str) -> bool:
    """Return True when the whole topic matches the wildcard pattern."""
    return compile_pattern(pattern).fullmatch(topic) is not None


@dataclass(frozen=True)
class TopicFilter:
    """
    Compiled topic filter of a registration.

    An empty filter accepts every event, including events without a topic.
    """

    patterns: tuple[str, ...] = ()
    compiled: tuple[re.Pattern[str], ...] = ()

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> TopicFilter:
        patterns = tuple(patterns)
        return cls(patterns, tuple(compile_pattern(p) for p in patterns))

    @classmethod
    def from_value(cls, value: Any) -> TopicFilter:
        """
        Build a filter from a registration property value.

        Args:
            value: None, a single pattern, or a sequence of patterns

        Raises:
            InvalidFilterError: for any other value
        """
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls.from_patterns([value])
        if isinstance(value, _SEQUENCE_TYPES):
            if not all(isinstance(item, str) for item in value):
                raise InvalidFilterError(value, f"Topic filter must only hold strings: {value!r}")
            return cls.from_patterns(sorted(value) if isinstance(value, (set, frozenset)) else value)
        raise InvalidFilterError(value)

    @property
    def accepts_all(self) -> bool:
        return not self.compiled

    def matches(self, topic: str | None) -> bool:
        if not self.compiled:
            return True
        if topic is None:
            return False
        return any(regex.fullmatch(topic) for regex in self.compiled)
