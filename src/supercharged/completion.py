"""Pending <-> Completed transitions.

Both transitions return a new Task and never modify their argument, so a
rejected call leaves no partial state behind.
"""
from __future__ import annotations
from dataclasses import replace
from datetime import datetime

from .errors import PreconditionError
from .models import Task, as_aware
from .scoring import bonus_for, value


def complete(task: Task, now: datetime) -> Task:
    """Mark a pending task completed, scoring it from its current attributes."""
    if task.is_completed:
        raise PreconditionError(f"Task {task.id} is already completed.")
    now = as_aware(now)
    original = value(task)
    bonus = bonus_for(task, now)
    return replace(
        task,
        is_completed=True,
        completed_at=now,
        original_value=original,
        bonus_points=bonus,
        achieved_value=original + bonus,
    )


def uncomplete(task: Task) -> Task:
    """Return a completed task to pending, dropping all completion scoring."""
    if not task.is_completed:
        raise PreconditionError(f"Task {task.id} is not completed.")
    return replace(
        task,
        is_completed=False,
        completed_at=None,
        original_value=None,
        bonus_points=None,
        achieved_value=None,
    )


def toggle(task: Task, now: datetime) -> Task:
    return uncomplete(task) if task.is_completed else complete(task, now)
