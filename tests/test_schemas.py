from datetime import date, datetime, timezone

import pytest

from taskdash.models.schemas import (
    AuthResponse,
    DashboardStats,
    Invoice,
    Project,
    Task,
    TaskStatus,
    TimeEntry,
    parse_records,
)


def test_task_title_required():
    with pytest.raises(ValueError):
        Task(id="t1", title="   ", project_id="p1")


def test_task_defaults_and_enum_coercion():
    task = Task.model_validate({"id": "t1", "title": "Ship", "project_id": "p1", "status": "done"})
    assert task.status == TaskStatus.DONE
    assert task.status == "done"
    assert task.description == ""
    assert task.due_date is None


def test_naive_due_date_is_treated_as_utc():
    task = Task.model_validate(
        {"id": "t1", "title": "Ship", "project_id": "p1", "due_date": "2024-05-20T09:30:00"}
    )
    assert task.due_date == datetime(2024, 5, 20, 9, 30, tzinfo=timezone.utc)


def test_zulu_timestamp_parses():
    project = Project.model_validate(
        {"id": "p1", "name": "Site", "owner_id": "u1", "deadline": "2024-06-01T00:00:00Z"}
    )
    assert project.deadline == datetime(2024, 6, 1, tzinfo=timezone.utc)
    assert project.tags == []


def test_time_entry_accepts_full_timestamp_for_date():
    entry = TimeEntry.model_validate(
        {
            "id": "te1",
            "task_id": "t1",
            "project_id": "p1",
            "user_id": "u1",
            "date": "2024-05-15T00:00:00.000Z",
            "duration": 30,
        }
    )
    assert entry.date == date(2024, 5, 15)


def test_time_entry_rejects_negative_duration():
    with pytest.raises(ValueError):
        TimeEntry(id="te1", task_id="t1", project_id="p1", user_id="u1", date=date(2024, 5, 15), duration=-5)


def test_invoice_period_end_after_start():
    with pytest.raises(ValueError):
        Invoice(id="i1", client_id="c1", period_start=date(2024, 5, 31), period_end=date(2024, 5, 1))


def test_records_are_frozen():
    task = Task(id="t1", title="Ship", project_id="p1")
    with pytest.raises(Exception):
        task.title = "Other"


def test_extra_backend_fields_are_kept():
    task = Task.model_validate(
        {"id": "t1", "title": "Ship", "project_id": "p1", "assignee": {"id": "u1", "name": "Alex"}}
    )
    assert task.model_extra["assignee"]["name"] == "Alex"


def test_dashboard_stats_reads_camel_case_keys():
    stats = DashboardStats.model_validate(
        {"totalTasks": 10, "completedTasks": 4, "todayCompletedTasks": 1, "overdueTasks": 2}
    )
    assert stats.total_tasks == 10
    assert stats.completed_tasks == 4
    assert stats.overdue_tasks == 2
    assert stats.at_risk_tasks == 0


def test_auth_response_nests_profile():
    auth = AuthResponse.model_validate(
        {"token": "abc", "user": {"id": "u1", "name": "Alex", "email": "a@example.com", "role": "admin"}}
    )
    assert auth.user.role == "admin"


def test_parse_records_skips_malformed_records():
    raw = [
        {"id": "t1", "title": "Good", "project_id": "p1"},
        {"id": "t2", "title": "", "project_id": "p1"},
        {"id": "t3"},
    ]
    parsed = parse_records(Task, raw)
    assert [t.id for t in parsed] == ["t1"]


def test_parse_records_handles_missing_collection():
    assert parse_records(Task, None) == []
