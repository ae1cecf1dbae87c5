"""Shared helpers for domain entities."""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4


def new_id() -> str:
    """Generate a new opaque record identifier."""
    return uuid4().hex


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class LifecycleStatus(str, Enum):
    """
    Status enum with an explicit transition table.

    Subclasses override ``transitions()`` with a mapping of value to the
    set of values reachable in one step. Anything not listed is terminal.
    """

    @classmethod
    def transitions(cls) -> dict[str, frozenset[str]]:
        return {}

    def can_transition_to(self, target: "LifecycleStatus") -> bool:
        return target.value in self.transitions().get(self.value, frozenset())

    @property
    def is_terminal(self) -> bool:
        return not self.transitions().get(self.value)
