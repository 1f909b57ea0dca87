from datetime import datetime, timedelta, timezone

import pytest

from supercharged.completion import complete
from supercharged.errors import ValidationError
from supercharged.models import (TaskDraft, edit_task, is_consistent, new_task, parse_timestamp,
                                 task_from_dict, task_to_dict, validate_draft)

from conftest import NOON, make_task


class TestDraftValidation:
    def test_new_task_defaults(self):
        task = new_task(TaskDraft(text="  Call bank  ", scheduled_at=NOON), NOON)
        assert task.text == "Call bank"
        assert task.created_at == NOON
        assert task.updated_at is None
        assert not task.is_completed
        assert is_consistent(task)

    @pytest.mark.parametrize("draft,field", [
        (TaskDraft(text="   ", scheduled_at=NOON), "text"),
        (TaskDraft(text="x", estimated_time=0, scheduled_at=NOON), "estimated_time"),
        (TaskDraft(text="x", estimated_time=-2, scheduled_at=NOON), "estimated_time"),
        (TaskDraft(text="x", scheduled_at=None), "scheduled_at"),
        (TaskDraft(text="x", importance=6, scheduled_at=NOON), "importance"),
        (TaskDraft(text="x", urgency=0, scheduled_at=NOON), "urgency"),
    ])
    def test_rejects_bad_drafts(self, draft, field):
        with pytest.raises(ValidationError) as exc:
            validate_draft(draft)
        assert exc.value.field == field

    def test_ids_unique(self):
        ids = {make_task().id for _ in range(200)}
        assert len(ids) == 200

    def test_naive_schedule_gets_local_zone(self):
        clean = validate_draft(TaskDraft(text="x", scheduled_at=datetime(2024, 1, 1, 9, 0)))
        assert clean.scheduled_at.tzinfo is not None


class TestEdit:
    def test_edit_overwrites_and_stamps(self):
        task = make_task(text="old", importance=1)
        later = NOON + timedelta(hours=1)
        edited = edit_task(task, TaskDraft(text="new", importance=5, urgency=2, estimated_time=3,
                                           scheduled_at=later), later)
        assert edited.id == task.id
        assert edited.created_at == task.created_at
        assert (edited.text, edited.importance, edited.urgency, edited.estimated_time) == ("new", 5, 2, 3.0)
        assert edited.updated_at == later

    def test_edit_validates(self):
        with pytest.raises(ValidationError):
            edit_task(make_task(), TaskDraft(text=""), NOON)


class TestConsistency:
    def test_partial_completion_is_inconsistent(self):
        task = make_task()
        task.bonus_points = 2
        assert not is_consistent(task)
        done = complete(make_task(), NOON)
        done.achieved_value += 1
        assert not is_consistent(done)


class TestSerialization:
    def test_dict_roundtrip(self):
        done = complete(make_task(importance=4, urgency=4, hours=0.5), NOON)
        again = task_from_dict(task_to_dict(done))
        assert again == done

    def test_pending_drops_completion_fields(self):
        raw = task_to_dict(make_task())
        raw['bonusPoints'] = 3
        assert task_from_dict(raw).bonus_points is None

    def test_missing_fields_raise(self):
        raw = task_to_dict(make_task())
        del raw['importance']
        with pytest.raises(KeyError):
            task_from_dict(raw)
        raw = task_to_dict(make_task())
        raw['createdAt'] = 'yesterday'
        with pytest.raises(ValueError):
            task_from_dict(raw)

    def test_parse_timestamp_forms(self):
        assert parse_timestamp("2024-05-06T10:00:00.000Z") == datetime(2024, 5, 6, 10, tzinfo=timezone.utc)
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
