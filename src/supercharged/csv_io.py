"""CSV export/import of the whole task collection.

Export writes every Task field (camelCase headers) with minimal quoting.
Import is header driven, regenerates ids, fills defaults for missing or
invalid values and replaces the whole collection. Bad rows are skipped and
reported back as warnings; they never abort the import.
"""
from __future__ import annotations
import csv
import io
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .errors import ExportError, ImportFileError, ImportRowError, PersistenceError
from .models import RATING_MAX, RATING_MIN, Task, as_aware, format_timestamp, new_task_id, parse_timestamp
from .scoring import value

EXPORT_HEADERS = (
    "id", "text", "importance", "urgency", "estimatedTime", "scheduledAt", "createdAt",
    "updatedAt", "isCompleted", "completedAt", "originalValue", "bonusPoints", "achievedValue",
)
TRUE_TOKENS = {"true", "1", "yes", "y"}
DEFAULT_TEXT = "Untitled Task"
DEFAULT_RATING = 3
DEFAULT_HOURS = 1.0


@dataclass
class ImportResult:
    tasks: List[Task] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


# -------------------- export --------------------
def _cell(raw: Any) -> str:
    if raw is None:
        return ''
    if isinstance(raw, bool):
        return 'TRUE' if raw else 'FALSE'
    if isinstance(raw, datetime):
        return format_timestamp(raw) or ''
    return str(raw)


def _row(task: Task) -> List[str]:
    return [_cell(v) for v in (
        task.id, task.text, task.importance, task.urgency, task.estimated_time,
        task.scheduled_at, task.created_at, task.updated_at, task.is_completed,
        task.completed_at, task.original_value, task.bonus_points, task.achieved_value,
    )]


def export_csv(tasks: Sequence[Task]) -> str:
    if not tasks:
        raise ExportError("No tasks to export.")
    out = io.StringIO()
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow(EXPORT_HEADERS)
    for task in tasks:
        writer.writerow(_row(task))
    return out.getvalue()


# -------------------- import --------------------
def _int_or(raw: Optional[str], default: int) -> int:
    try:
        parsed = int((raw or '').strip())
    except ValueError:
        return default
    return parsed if RATING_MIN <= parsed <= RATING_MAX else default


def _hours_or(raw: Optional[str], default: float) -> float:
    try:
        parsed = float((raw or '').strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _opt_int(raw: Optional[str]) -> Optional[int]:
    try:
        return int((raw or '').strip())
    except ValueError:
        return None


def _task_from_row(data: Dict[str, str], now: datetime) -> Task:
    task = Task(
        id=new_task_id(),
        text=(data.get('text') or '').strip() or DEFAULT_TEXT,
        importance=_int_or(data.get('importance'), DEFAULT_RATING),
        urgency=_int_or(data.get('urgency'), DEFAULT_RATING),
        estimated_time=_hours_or(data.get('estimatedTime'), DEFAULT_HOURS),
        scheduled_at=parse_timestamp(data.get('scheduledAt')) or now,
        created_at=parse_timestamp(data.get('createdAt')) or now,
        updated_at=parse_timestamp(data.get('updatedAt')),
        is_completed=(data.get('isCompleted') or '').strip().lower() in TRUE_TOKENS,
    )
    if task.is_completed:
        # completion fields must be all present and consistent
        original = _opt_int(data.get('originalValue'))
        bonus = _opt_int(data.get('bonusPoints'))
        task.completed_at = parse_timestamp(data.get('completedAt')) or now
        task.original_value = original if original is not None else value(task)
        task.bonus_points = bonus if bonus is not None and bonus >= 0 else 0
        task.achieved_value = task.original_value + task.bonus_points
    return task


def import_csv(text: str, now: datetime) -> ImportResult:
    """Parse exported CSV text into fresh tasks.

    Records are read one at a time; a record the csv module cannot parse is
    skipped like a short row. Warnings name the line the record ends on.
    Raises ImportFileError when there is no header or no data row at all.
    """
    now = as_aware(now)
    reader = csv.reader(io.StringIO(text.lstrip('\ufeff')))
    try:
        headers = [h.strip() for h in next(reader)]
    except StopIteration:
        raise ImportFileError("CSV file is empty or has no data rows.") from None
    except csv.Error as exc:
        raise ImportFileError(f"Error importing CSV header: {exc}") from exc
    result = ImportResult()
    seen_rows = 0
    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            seen_rows += 1
            result.warnings.append(str(ImportRowError(reader.line_num, f"{exc}.")))
            continue
        if not any(cell.strip() for cell in row):
            continue
        seen_rows += 1
        if len(row) != len(headers):
            err = ImportRowError(reader.line_num, f"expected {len(headers)} columns, found {len(row)}.")
            result.warnings.append(str(err))
            continue
        result.tasks.append(_task_from_row(dict(zip(headers, row)), now))
    if not seen_rows:
        raise ImportFileError("CSV file is empty or has no data rows.")
    return result


# -------------------- files --------------------
def write_csv_file(path: Path, text: str) -> None:
    try:
        Path(path).write_text(text, encoding='utf-8')
    except OSError as exc:
        raise PersistenceError(f"Could not write {path}: {exc}") from exc


def read_csv_file(path: Path) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceError(f"Error reading file {path}: {exc}") from exc
