from datetime import timedelta

import pytest

from supercharged.completion import complete
from supercharged.csv_io import EXPORT_HEADERS, export_csv, import_csv, read_csv_file, write_csv_file
from supercharged.errors import ExportError, ImportFileError, PersistenceError
from supercharged.models import is_consistent

from conftest import NOON, make_task

HEADER = ",".join(EXPORT_HEADERS)


def comparable(task):
    return (task.text, task.importance, task.urgency, task.estimated_time, task.scheduled_at,
            task.created_at, task.updated_at, task.is_completed, task.completed_at,
            task.original_value, task.bonus_points, task.achieved_value)


class TestExport:
    def test_header_and_quoting(self):
        task = make_task(text='Buy milk, eggs and "good" bread')
        lines = export_csv([task]).splitlines()
        assert lines[0] == HEADER
        assert '"Buy milk, eggs and ""good"" bread"' in lines[1]
        assert lines[1].startswith(task.id + ",")
        assert ",FALSE," in lines[1]

    def test_empty_collection_rejected(self):
        with pytest.raises(ExportError):
            export_csv([])


class TestImport:
    def test_roundtrip_preserves_fields(self):
        pending = make_task(text="multi\nline, task", importance=2, urgency=5, hours=1.5)
        done = complete(make_task(text="done", importance=5, urgency=5, hours=2, scheduled_at=NOON),
                        NOON + timedelta(hours=1))
        result = import_csv(export_csv([pending, done]), NOON)
        assert result.warnings == []
        assert [comparable(t) for t in result.tasks] == [comparable(pending), comparable(done)]
        assert {t.id for t in result.tasks}.isdisjoint({pending.id, done.id})

    def test_skips_short_rows_and_continues(self):
        good = export_csv([make_task(text="keep me")]).splitlines()[1]
        text = "\n".join([HEADER, "broken,row", good, ""])
        result = import_csv(text, NOON)
        assert [t.text for t in result.tasks] == ["keep me"]
        assert len(result.warnings) == 1
        assert "row 2" in result.warnings[0]

    def test_unparseable_record_is_skipped(self):
        text = "\n".join([
            "text,importance",
            "before,4",
            "x" * 200_000 + ",2",
            "after,5",
            "",
        ])
        result = import_csv(text, NOON)
        assert [(t.text, t.importance) for t in result.tasks] == [("before", 4), ("after", 5)]
        assert len(result.warnings) == 1
        assert "row 3" in result.warnings[0]
        assert "field limit" in result.warnings[0]

    def test_defaults_for_missing_and_invalid(self):
        text = "text,importance,urgency,estimatedTime,scheduledAt,isCompleted\n,9,abc,-1,whenever,no\n"
        task = import_csv(text, NOON).tasks[0]
        assert task.text == "Untitled Task"
        assert (task.importance, task.urgency, task.estimated_time) == (3, 3, 1.0)
        assert task.scheduled_at == NOON
        assert task.created_at == NOON
        assert task.updated_at is None
        assert not task.is_completed
        assert task.completed_at is None

    def test_completed_row_is_normalized(self):
        text = "text,importance,urgency,isCompleted,bonusPoints,achievedValue\nship,4,2,true,1,99\n"
        task = import_csv(text, NOON).tasks[0]
        assert task.is_completed
        assert task.completed_at == NOON
        assert (task.original_value, task.bonus_points, task.achieved_value) == (8, 1, 9)
        assert is_consistent(task)

    def test_no_data_rows(self):
        with pytest.raises(ImportFileError):
            import_csv(HEADER + "\n", NOON)
        with pytest.raises(ImportFileError):
            import_csv("", NOON)


class TestFiles:
    def test_write_then_read(self, tmp_path):
        path = tmp_path / "out.csv"
        write_csv_file(path, "a,b\n")
        assert read_csv_file(path) == "a,b\n"

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            read_csv_file(tmp_path / "nope.csv")
