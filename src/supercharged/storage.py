"""Persistence helpers (load/save) for the task snapshot.

The snapshot is a JSON list of task dicts in collection order. A corrupt or
unreadable snapshot is removed and the app starts empty; write failures are
reported as PersistenceError and never touch the in-memory board.
"""
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .errors import PersistenceError
from .models import Task, is_consistent, task_from_dict, task_to_dict

TaskEntry = Dict[str, Any]


@dataclass
class LoadResult:
    tasks: List[Task] = field(default_factory=list)
    notice: str = ''


class Storage:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load_tasks(self) -> LoadResult:
        """Load the snapshot.

        Missing file -> empty result. Corrupt file -> empty result with a
        notice; the bad snapshot is deleted so the next save starts clean.
        """
        if not self.path.exists():
            return LoadResult()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, list):
                raise ValueError("snapshot is not a list of tasks")
            tasks = [task_from_dict(entry) for entry in data]
            for task in tasks:
                if not is_consistent(task):
                    raise ValueError(f"task {task.id} has inconsistent completion fields")
        except (OSError, ValueError, TypeError, KeyError) as exc:
            notice = f"Could not load saved tasks ({exc}); starting with an empty list."
            try:
                self.path.unlink()
            except OSError as unlink_exc:
                notice += f" The bad snapshot could not be removed: {unlink_exc}"
            return LoadResult(notice=notice)
        return LoadResult(tasks=tasks)

    def save_tasks(self, tasks: Sequence[Task]) -> None:
        """Persist tasks to disk (pretty-printed). Raises PersistenceError."""
        entries: List[TaskEntry] = [task_to_dict(t) for t in tasks]
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.tasks-', suffix='.json')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(entries, f, indent=4)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not save tasks to {self.path}: {exc}") from exc
