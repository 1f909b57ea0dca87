"""Value, efficiency and bonus-window calculations.

All functions are pure and read the task's current attributes; nothing here
caches a score. Time-dependent results take an explicit ``now``.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from .models import Task

BONUS_RATE = 0.20
BONUS_WINDOW_FACTOR = 2  # window length = factor x estimated hours
LOW_TIME_PERCENT = 20.0
MID_TIME_PERCENT = 50.0


@dataclass(frozen=True)
class ScoredTask:
    task: Task
    value: int
    efficiency: float


@dataclass(frozen=True)
class BonusStatus:
    """Countdown information for the bonus window of a pending task.

    state is one of: "none" (no window / completed), "upcoming", "open", "closed".
    percent_left is 100 while upcoming and shrinks to 0 as the window closes.
    level is "green", "yellow" or "red" (empty when no bonus is possible).
    """
    state: str
    percent_left: float = 0.0
    starts_in: Optional[timedelta] = None
    ends_in: Optional[timedelta] = None
    level: str = ''

    @property
    def possible(self) -> bool:
        return self.state in ("upcoming", "open")


def value(task: Task) -> int:
    return task.importance * task.urgency


def efficiency(task: Task) -> float:
    if not task.estimated_time or task.estimated_time <= 0:
        return 0
    return value(task) / task.estimated_time


def scored(task: Task) -> ScoredTask:
    return ScoredTask(task=task, value=value(task), efficiency=efficiency(task))


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# -------------------- bonus window --------------------
def bonus_window_bounds(task: Task) -> Optional[Tuple[datetime, datetime]]:
    """Return (start, end) of the bonus window, or None if the task has none."""
    if not task.estimated_time or task.estimated_time <= 0 or task.scheduled_at is None:
        return None
    start = task.scheduled_at
    end = start + timedelta(hours=task.estimated_time * BONUS_WINDOW_FACTOR)
    return start, end


def in_bonus_window(task: Task, when: datetime) -> bool:
    bounds = bonus_window_bounds(task)
    if bounds is None:
        return False
    start, end = bounds
    return start <= when <= end


def bonus_for(task: Task, when: datetime) -> int:
    """Bonus points a completion at ``when`` would earn (0 outside the window)."""
    if not in_bonus_window(task, when):
        return 0
    return round_half_up(value(task) * BONUS_RATE)


def bonus_status(task: Task, now: datetime) -> BonusStatus:
    if task.is_completed:
        return BonusStatus("none")
    bounds = bonus_window_bounds(task)
    if bounds is None:
        return BonusStatus("none")
    start, end = bounds
    if now > end:
        return BonusStatus("closed")
    if now < start:
        return BonusStatus("upcoming", 100.0, starts_in=start - now, ends_in=end - now, level="green")
    window = (end - start).total_seconds()
    left = max(0.0, (end - now).total_seconds())
    percent = left / window * 100 if window > 0 else 0.0
    if percent < LOW_TIME_PERCENT:
        level = "red"
    elif percent < MID_TIME_PERCENT:
        level = "yellow"
    else:
        level = "green"
    return BonusStatus("open", percent, ends_in=end - now, level=level)
