"""Board: holds the task collection, applies mutations, and renders it.

Tasks are stored in insertion order; the displayed order is recomputed on
every read (ranked pending list, then completed list newest first). Board
numbers shown to the user are positions in that displayed order: pending
tasks first, then completed tasks when the completed list is visible.

Every mutation replaces whole Task values, so a task is never observed
half way through a transition.
"""
from __future__ import annotations
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Iterable, Any
import shutil

from .completion import toggle
from .errors import PreconditionError
from .models import IMPORTANCE_LEVELS, URGENCY_LEVELS, Task, TaskDraft, edit_task, new_task, task_to_dict
from .ranking import order_completed, rank_pending
from .report import Summary, summarize
from .scoring import ScoredTask, bonus_status
from .theme import (color, HEADER_COLOR, ID_COLOR, EMPTY_COLOR, META_COLOR, BOLD,
                    C_PENDING, C_DONE, C_BONUS, LEVEL_COLOR)

MIN_WIDTH = 40
INDENT = 5


class Board:
    def __init__(self, tasks: Optional[Iterable[Task]] = None):
        self.tasks: List[Task] = []
        if tasks:
            self.replace_all(tasks)

    # -------------------- queries --------------------
    def all_tasks(self) -> List[Task]:
        return list(self.tasks)

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def pending(self) -> List[ScoredTask]:
        return rank_pending(self.tasks)

    def completed(self) -> List[ScoredTask]:
        return order_completed(self.tasks)

    def displayed(self, show_completed: bool = True) -> List[ScoredTask]:
        """Tasks in on-screen order; board number n is displayed()[n - 1]."""
        shown = self.pending()
        if show_completed:
            shown += self.completed()
        return shown

    def task_at(self, number: int, show_completed: bool = True) -> Optional[Task]:
        shown = self.displayed(show_completed)
        if number < 1 or number > len(shown):
            return None
        return shown[number - 1].task

    def summary(self, now: datetime) -> Summary:
        return summarize(self.tasks, now)

    # -------------------- task operations --------------------
    def add_task(self, draft: TaskDraft, now: datetime) -> Task:
        """Validate and append a new pending task. Raises ValidationError."""
        task = new_task(draft, now)
        if self.get(task.id) is not None:  # pragma: no cover - uuid4 collision
            raise PreconditionError(f"Duplicate task id {task.id}.")
        self.tasks.append(task)
        return task

    def update_task(self, task_id: str, draft: TaskDraft, now: datetime) -> str:
        """Edit a task's attributes. Raises ValidationError on a bad draft."""
        idx = self._index(task_id)
        if idx is None:
            return f'Task id {task_id} not found.'
        self.tasks[idx] = edit_task(self.tasks[idx], draft, now)
        return f'Task "{self.tasks[idx].text}" updated.'

    def toggle_complete(self, task_id: str, now: datetime) -> str:
        idx = self._index(task_id)
        if idx is None:
            return f'Task id {task_id} not found.'
        task = toggle(self.tasks[idx], now)
        self.tasks[idx] = task
        if not task.is_completed:
            return f'Task "{task.text}" moved back to pending.'
        msg = f'Task "{task.text}" completed: +{task.achieved_value} points'
        if task.bonus_points:
            msg += f' (includes {task.bonus_points} bonus)'
        return msg + '.'

    def delete_task(self, task_id: str) -> str:
        idx = self._index(task_id)
        if idx is None:
            return f'Task id {task_id} not found.'
        task = self.tasks.pop(idx)
        return f'Task "{task.text}" removed.'

    def clear_completed(self) -> str:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if not t.is_completed]
        removed = before - len(self.tasks)
        return f'{removed} completed task{"s" if removed != 1 else ""} cleared.'

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in a new collection (load/import). Later duplicates of an id are dropped."""
        seen = set()
        fresh: List[Task] = []
        for task in tasks:
            if task.id in seen:
                continue
            seen.add(task.id)
            fresh.append(task)
        self.tasks = fresh

    def _index(self, task_id: str) -> Optional[int]:
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                return idx
        return None

    # -------------------- serialization --------------------
    def get_tasks(self) -> List[Dict[str, Any]]:
        return [task_to_dict(t) for t in self.tasks]

    # -------------------- display --------------------
    def display(self, now: datetime, show_completed: bool = True) -> None:
        for line in self.render(now, show_completed):
            print(line)

    def render(self, now: datetime, show_completed: bool = True, width: Optional[int] = None) -> List[str]:
        width = max(MIN_WIDTH, width or shutil.get_terminal_size((100, 30)).columns)
        summary = self.summary(now)
        lines: List[str] = [
            color(f"Pending value: {summary.total_pending_value}", HEADER_COLOR, BOLD)
            + "   " + color(f"Achieved today: {summary.value_achieved_today}", C_DONE, BOLD),
            '',
            color(f"PENDING ({summary.pending_count})", HEADER_COLOR, BOLD),
            color('-' * width, HEADER_COLOR),
        ]
        pending = self.pending()
        if not pending:
            lines.append(color('(no pending tasks)', EMPTY_COLOR))
        for number, item in enumerate(pending, start=1):
            lines.extend(self._pending_block(number, item, now, width))
        if show_completed:
            lines += ['', color(f"COMPLETED ({summary.completed_count})", HEADER_COLOR, BOLD),
                      color('-' * width, HEADER_COLOR)]
            done = self.completed()
            if not done:
                lines.append(color('(nothing completed yet)', EMPTY_COLOR))
            for number, item in enumerate(done, start=len(pending) + 1):
                lines.extend(self._completed_block(number, item, width))
        return lines

    def _pending_block(self, number: int, item: ScoredTask, now: datetime, width: int) -> List[str]:
        t = item.task
        out = self._wrap_title(number, t.text, width, C_PENDING)
        meta = (f"value {item.value} | eff {item.efficiency:.1f}/h | "
                f"imp {IMPORTANCE_LEVELS.get(t.importance, t.importance)} | "
                f"urg {URGENCY_LEVELS.get(t.urgency, t.urgency)} | "
                f"{_hours(t.estimated_time)} | {_when(t.scheduled_at)}")
        out.append(' ' * INDENT + color(meta, META_COLOR))
        status = bonus_status(t, now)
        if status.state == 'upcoming' and status.starts_in is not None:
            out.append(' ' * INDENT + color(f"bonus window starts in {_span(status.starts_in)}", LEVEL_COLOR['green']))
        elif status.state == 'open' and status.ends_in is not None:
            bar = _bar(status.percent_left)
            out.append(' ' * INDENT + color(f"{bar} bonus ends in {_span(status.ends_in)}", LEVEL_COLOR[status.level]))
        elif status.state == 'closed':
            out.append(' ' * INDENT + color("bonus window passed", META_COLOR))
        return out

    def _completed_block(self, number: int, item: ScoredTask, width: int) -> List[str]:
        t = item.task
        out = self._wrap_title(number, f"✓ {t.text}", width, C_DONE)
        meta = f"+{t.achieved_value} points"
        if t.bonus_points:
            meta += " " + color(f"(bonus +{t.bonus_points})", C_BONUS)
        meta += color(f" | done {_when(t.completed_at)}", META_COLOR)
        out.append(' ' * INDENT + meta)
        return out

    def _wrap_title(self, number: int, text: str, width: int, title_color: str) -> List[str]:
        prefix_visible = f"{number}.".ljust(INDENT)
        prefix_colored = color(f"{number}.", ID_COLOR) + ' ' * (INDENT - len(f"{number}."))
        limit = max(1, width - len(prefix_visible))
        lines_raw: List[str] = []
        current = ''
        for w in text.split():
            candidate = w if not current else current + ' ' + w
            if len(candidate) <= limit:
                current = candidate
            else:
                if current:
                    lines_raw.append(current)
                current = w
        if current:
            lines_raw.append(current)
        colored: List[str] = []
        for idx, raw_line in enumerate(lines_raw):
            lead = prefix_colored if idx == 0 else ' ' * len(prefix_visible)
            colored.append(lead + color(raw_line, title_color))
        return colored if colored else [prefix_colored + color('<empty>', title_color)]

    def __str__(self) -> str:
        done = sum(1 for t in self.tasks if t.is_completed)
        return f'Pending: {len(self.tasks) - done} tasks, Completed: {done} tasks'


def _hours(hours: float) -> str:
    return f"{hours:g}h"


def _when(dt: Optional[datetime]) -> str:
    if dt is None:
        return 'not scheduled'
    return dt.astimezone().strftime('%b %d %H:%M')


def _span(delta: timedelta) -> str:
    minutes = max(0, int(delta.total_seconds() // 60))
    days, rem = divmod(minutes, 60 * 24)
    hours, mins = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _bar(percent: float, size: int = 10) -> str:
    filled = int(round(percent / 100 * size))
    return '[' + '#' * filled + '.' * (size - filled) + ']'
