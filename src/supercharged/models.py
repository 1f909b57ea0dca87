"""Data models for Supercharged Tasks.

Exposes the Task dataclass, the TaskDraft accepted from user input and the
helpers that build, edit and (de)serialize tasks. Snapshot keys keep the
camelCase names used by earlier exports ("estimatedTime", "isCompleted", ...)
so existing JSON and CSV files stay readable.

Timestamps are always timezone-aware datetimes. Naive values coming from
user input or old files are interpreted in the local timezone.
"""
from __future__ import annotations
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, cast

from .errors import ValidationError

IMPORTANCE_LEVELS: Dict[int, str] = {1: "Very Low", 2: "Low", 3: "Medium", 4: "High", 5: "Very High"}
URGENCY_LEVELS: Dict[int, str] = {1: "Later", 2: "Soon", 3: "Normal", 4: "Quickly", 5: "ASAP"}
RATING_MIN = 1
RATING_MAX = 5


@dataclass
class Task:
    """A single prioritized task.

    Fields:
        id: Opaque unique string (uuid4 hex), immutable.
        text: Non-empty, trimmed description.
        importance / urgency: Integers 1-5.
        estimated_time: Hours, > 0.
        scheduled_at: When the task is planned to start.
        created_at / updated_at: Bookkeeping timestamps (updated_at None until edited).
        is_completed: Completion flag; the four fields below are set iff True.
        completed_at, original_value, bonus_points, achieved_value: Scoring
            captured at completion time (achieved = original + bonus).
    """
    id: str
    text: str
    importance: int
    urgency: int
    estimated_time: float
    scheduled_at: datetime
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    original_value: Optional[int] = None
    bonus_points: Optional[int] = None
    achieved_value: Optional[int] = None

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        state = "done" if self.is_completed else "pending"
        return f"Task(id={self.id}, text={self.text!r}, {state})"


@dataclass
class TaskDraft:
    """User-entered attributes for a new or edited task (not yet validated)."""
    text: str
    importance: int = 3
    urgency: int = 3
    estimated_time: float = 1.0
    scheduled_at: Optional[datetime] = None


def now_local() -> datetime:
    return datetime.now().astimezone()


def as_aware(dt: datetime) -> datetime:
    """Attach the local timezone to naive datetimes; aware ones pass through."""
    return dt if dt.tzinfo is not None else dt.astimezone()


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (trailing 'Z' allowed). Returns None if unparseable."""
    if isinstance(raw, datetime):
        return as_aware(raw)
    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return as_aware(datetime.fromisoformat(text))
    except ValueError:
        return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def new_task_id() -> str:
    return uuid.uuid4().hex


# -------------------- validation --------------------
def validate_draft(draft: TaskDraft) -> TaskDraft:
    """Check a draft and return a normalized copy (trimmed text, aware timestamp).

    Raises ValidationError naming the first offending field.
    """
    text = (draft.text or '').strip()
    if not text:
        raise ValidationError("Task description cannot be empty.", field="text")
    for name in ("importance", "urgency"):
        rating = getattr(draft, name)
        if isinstance(rating, bool) or not isinstance(rating, int) or not RATING_MIN <= rating <= RATING_MAX:
            raise ValidationError(f"{name.capitalize()} must be an integer from {RATING_MIN} to {RATING_MAX}.", field=name)
    try:
        hours = float(draft.estimated_time)
    except (TypeError, ValueError):
        raise ValidationError("Estimated time must be a number of hours.", field="estimated_time") from None
    if not hours > 0:
        raise ValidationError("Estimated time must be greater than 0 hours.", field="estimated_time")
    if draft.scheduled_at is None:
        raise ValidationError("Scheduled date and time cannot be empty.", field="scheduled_at")
    return TaskDraft(
        text=text,
        importance=draft.importance,
        urgency=draft.urgency,
        estimated_time=hours,
        scheduled_at=as_aware(draft.scheduled_at),
    )


def new_task(draft: TaskDraft, now: datetime) -> Task:
    """Create a pending task from a draft. Raises ValidationError."""
    clean = validate_draft(draft)
    return Task(
        id=new_task_id(),
        text=clean.text,
        importance=clean.importance,
        urgency=clean.urgency,
        estimated_time=clean.estimated_time,
        scheduled_at=cast(datetime, clean.scheduled_at),
        created_at=as_aware(now),
    )


def edit_task(task: Task, draft: TaskDraft, now: datetime) -> Task:
    """Overwrite the editable attributes and stamp updated_at.

    Completion fields are left as they are; a completed task keeps the score
    it earned when it was completed.
    """
    clean = validate_draft(draft)
    return replace(
        task,
        text=clean.text,
        importance=clean.importance,
        urgency=clean.urgency,
        estimated_time=clean.estimated_time,
        scheduled_at=cast(datetime, clean.scheduled_at),
        updated_at=as_aware(now),
    )


def draft_from_task(task: Task) -> TaskDraft:
    return TaskDraft(
        text=task.text,
        importance=task.importance,
        urgency=task.urgency,
        estimated_time=task.estimated_time,
        scheduled_at=task.scheduled_at,
    )


def is_consistent(task: Task) -> bool:
    """True when the task is fully pending-shaped or fully completed-shaped."""
    completion = (task.completed_at, task.original_value, task.bonus_points, task.achieved_value)
    if not task.is_completed:
        return all(v is None for v in completion)
    if any(v is None for v in completion):
        return False
    original, bonus = cast(int, task.original_value), cast(int, task.bonus_points)
    return bonus >= 0 and task.achieved_value == original + bonus


# -------------------- serialization --------------------
def task_to_dict(task: Task) -> Dict[str, Any]:
    """Snapshot shape (JSON friendly, camelCase keys)."""
    return {
        'id': task.id,
        'text': task.text,
        'importance': task.importance,
        'urgency': task.urgency,
        'estimatedTime': task.estimated_time,
        'scheduledAt': format_timestamp(task.scheduled_at),
        'createdAt': format_timestamp(task.created_at),
        'updatedAt': format_timestamp(task.updated_at),
        'isCompleted': task.is_completed,
        'completedAt': format_timestamp(task.completed_at),
        'originalValue': task.original_value,
        'bonusPoints': task.bonus_points,
        'achievedValue': task.achieved_value,
    }


def task_from_dict(raw: Mapping[str, Any]) -> Task:
    """Rebuild a task from its snapshot dict.

    Raises ValueError when a required field is missing or malformed; the
    storage layer treats that as a corrupt snapshot.
    """
    scheduled_at = parse_timestamp(raw.get('scheduledAt'))
    created_at = parse_timestamp(raw.get('createdAt'))
    if not raw.get('id') or scheduled_at is None or created_at is None:
        raise ValueError(f"incomplete task record: {raw!r}")
    is_completed = raw.get('isCompleted', False)
    if not isinstance(is_completed, bool):
        raise ValueError(f"isCompleted must be true or false, got {is_completed!r}")
    task = Task(
        id=str(raw['id']),
        text=str(raw.get('text', '')),
        importance=int(raw['importance']),
        urgency=int(raw['urgency']),
        estimated_time=float(raw['estimatedTime']),
        scheduled_at=scheduled_at,
        created_at=created_at,
        updated_at=parse_timestamp(raw.get('updatedAt')),
        is_completed=is_completed,
    )
    if is_completed:
        task.completed_at = parse_timestamp(raw.get('completedAt'))
        task.original_value = _opt_int(raw.get('originalValue'))
        task.bonus_points = _opt_int(raw.get('bonusPoints'))
        task.achieved_value = _opt_int(raw.get('achievedValue'))
    return task


def _opt_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)
