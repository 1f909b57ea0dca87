"""Ordering of pending and completed tasks.

Pending: efficiency desc, value desc, scheduled_at asc (only when both
tasks have one), created_at asc. Python's sort is stable, so tasks that tie
on every key keep their collection order on every call.
"""
from __future__ import annotations
from functools import cmp_to_key
from typing import Iterable, List

from .models import Task
from .scoring import ScoredTask, scored


def _compare_pending(a: ScoredTask, b: ScoredTask) -> int:
    if a.efficiency != b.efficiency:
        return -1 if a.efficiency > b.efficiency else 1
    if a.value != b.value:
        return -1 if a.value > b.value else 1
    # scheduled_at is optional on this rule only, so it cannot be a plain key tuple
    if a.task.scheduled_at is not None and b.task.scheduled_at is not None:
        if a.task.scheduled_at != b.task.scheduled_at:
            return -1 if a.task.scheduled_at < b.task.scheduled_at else 1
    if a.task.created_at != b.task.created_at:
        return -1 if a.task.created_at < b.task.created_at else 1
    return 0


def rank_pending(tasks: Iterable[Task]) -> List[ScoredTask]:
    """Pending tasks in descending priority, annotated with value/efficiency."""
    pending = [scored(t) for t in tasks if not t.is_completed]
    pending.sort(key=cmp_to_key(_compare_pending))
    return pending


def order_completed(tasks: Iterable[Task]) -> List[ScoredTask]:
    """Completed tasks, most recently completed first."""
    done = [scored(t) for t in tasks if t.is_completed]
    done.sort(key=lambda s: s.task.completed_at or s.task.created_at, reverse=True)
    return done
