"""Summary numbers shown above the board. Recomputed on every call."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .models import Task, as_aware
from .scoring import value


@dataclass(frozen=True)
class Summary:
    pending_count: int
    completed_count: int
    total_pending_value: int
    value_achieved_today: int


def total_pending_value(tasks: Iterable[Task]) -> int:
    return sum(value(t) for t in tasks if not t.is_completed)


def value_achieved_today(tasks: Iterable[Task], now: datetime) -> int:
    """Sum of achieved value for tasks completed on ``now``'s local calendar day."""
    today = as_aware(now).astimezone().date()
    total = 0
    for t in tasks:
        if not t.is_completed or t.completed_at is None:
            continue
        if t.completed_at.astimezone().date() != today:
            continue
        total += t.achieved_value if t.achieved_value is not None else value(t)
    return total


def summarize(tasks: Iterable[Task], now: datetime) -> Summary:
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.is_completed)
    return Summary(
        pending_count=len(tasks) - completed,
        completed_count=completed,
        total_pending_value=total_pending_value(tasks),
        value_achieved_today=value_achieved_today(tasks, now),
    )
