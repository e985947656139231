"""
Ordering of the waiting queue.

Severity dominates wait time: every Emergency entry is seen before any
Urgent entry, and every Urgent entry before any Normal one.  Inside a
tier entries are first-in-first-out by arrival time.  Python's sort is
stable, so entries with identical keys keep their input order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, TypeVar, Union

from .priority import PriorityLevel

T = TypeVar("T")


@dataclass(frozen=True)
class WaitingEntry:
    """A queue position detached from storage."""

    priority: PriorityLevel
    arrival_time: Union[datetime, float]
    entry_id: Any = None
    patient_id: Any = field(default=None, compare=False)

    def __post_init__(self):
        # Rejects anything outside the three levels.
        object.__setattr__(self, "priority", PriorityLevel(self.priority))


def priority_rank(priority) -> int:
    """Rank used for ordering; raises ``ValueError`` for unknown levels."""
    return PriorityLevel(priority).rank


def sequence(entries: Iterable[T]) -> list[T]:
    """Return ``entries`` in the order patients should be seen.

    The input is not modified.  Each entry must expose ``priority`` and
    ``arrival_time``.
    """
    return sorted(entries, key=lambda e: (priority_rank(e.priority), e.arrival_time))
