from datetime import datetime, timedelta

import pytest

from supercharged.models import Task, TaskDraft, new_task

# local noon keeps "today" comparisons away from midnight
NOON = datetime(2024, 5, 6, 12, 0).astimezone()


def make_task(text="Write report", importance=3, urgency=3, hours=1.0,
              scheduled_at=None, created_at=None) -> Task:
    draft = TaskDraft(text=text, importance=importance, urgency=urgency,
                      estimated_time=hours, scheduled_at=scheduled_at or NOON)
    return new_task(draft, created_at or NOON - timedelta(days=1))


@pytest.fixture
def noon():
    return NOON
