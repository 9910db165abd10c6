from datetime import date, datetime, timezone

from dashboard.services import filter_service
from factories import make_entry, make_profile, make_project, make_task
from taskdash.models.schemas import Priority, TaskStatus

TODAY = date(2024, 5, 15)


def test_all_sentinel_matches_everything():
    tasks = [make_task("t1", status="todo"), make_task("t2", status="done")]
    assert filter_service.filter_tasks(tasks, status="all", priority="all") == tasks


def test_filter_tasks_combines_constraints():
    tasks = [
        make_task("t1", status="todo", priority="high"),
        make_task("t2", status="todo", priority="low"),
        make_task("t3", status="done", priority="high"),
    ]
    result = filter_service.filter_tasks(tasks, status=TaskStatus.TODO, priority="high")
    assert [t.id for t in result] == ["t1"]


def test_task_search_is_case_insensitive_over_description():
    tasks = [
        make_task("t1", title="Landing page"),
        make_task("t2", title="Invoices", description="Export to PDF"),
    ]
    assert [t.id for t in filter_service.filter_tasks(tasks, search="pdf")] == ["t2"]
    assert [t.id for t in filter_service.filter_tasks(tasks, search="LANDING")] == ["t1"]


def test_filter_tasks_by_assignee_and_project():
    tasks = [make_task("t1", assignee_id="u2"), make_task("t2", project_id="p2")]
    assert [t.id for t in filter_service.filter_tasks(tasks, assignee="u2")] == ["t1"]
    assert [t.id for t in filter_service.filter_tasks(tasks, project="p2")] == ["t2"]


def test_filter_projects():
    projects = [
        make_project("p1", name="Website", status="in_progress", priority="high"),
        make_project("p2", name="Mobile app", description="iOS rewrite", status="on_hold"),
    ]
    assert [p.id for p in filter_service.filter_projects(projects, search="ios")] == ["p2"]
    assert [p.id for p in filter_service.filter_projects(projects, status="in_progress")] == ["p1"]
    assert [p.id for p in filter_service.filter_projects(projects, priority=Priority.HIGH)] == ["p1"]


def test_tasks_by_status_has_every_column():
    columns = filter_service.tasks_by_status([make_task("t1", status="review")])
    assert list(columns) == list(TaskStatus)
    assert [t.id for t in columns[TaskStatus.REVIEW]] == ["t1"]
    assert columns[TaskStatus.DONE] == []


def test_assignable_profiles_excludes_clients():
    profiles = [make_profile("u1"), make_profile("u2", role="client")]
    assert [p.id for p in filter_service.assignable_profiles(profiles)] == ["u1"]


def test_available_timer_tasks():
    tasks = [
        make_task("t1"),
        make_task("t2", status="done"),
        make_task("t3", assignee_id="u2"),
        make_task("t4", project_id="p2", status="done"),
    ]
    assert [t.id for t in filter_service.available_timer_tasks(tasks, "u1")] == ["t1"]
    assert [t.id for t in filter_service.available_timer_tasks(tasks, "u1", "p2")] == ["t4"]


def test_lookup_dangling_reference():
    assert filter_service.lookup([make_project("p1")], "missing") is None


def test_time_entries_only_for_user_and_window():
    entries = [
        make_entry("te1", date="2024-05-15"),
        make_entry("te2", date="2024-05-13"),
        make_entry("te3", date="2024-04-30"),
        make_entry("te4", user_id="u2"),
    ]
    today = filter_service.filter_time_entries(entries, user_id="u1", date_filter="today", today=TODAY)
    week = filter_service.filter_time_entries(entries, user_id="u1", date_filter="week", today=TODAY)
    everything = filter_service.filter_time_entries(entries, user_id="u1", today=TODAY)

    assert [e.id for e in today] == ["te1"]
    assert [e.id for e in week] == ["te1", "te2"]
    assert [e.id for e in everything] == ["te1", "te2", "te3"]


def test_time_entry_search_covers_task_and_project_names():
    entries = [
        make_entry("te1", description="", task_id="t1", project_id="p1"),
        make_entry("te2", description="", task_id="t2", project_id="p2"),
    ]
    tasks = [make_task("t1", title="Hero banner"), make_task("t2", title="Other")]
    projects = [make_project("p1", name="Website"), make_project("p2", name="Mobile")]

    by_task = filter_service.filter_time_entries(entries, tasks, projects, user_id="u1", search="banner")
    by_project = filter_service.filter_time_entries(entries, tasks, projects, user_id="u1", search="mobile")

    assert [e.id for e in by_task] == ["te1"]
    assert [e.id for e in by_project] == ["te2"]


def test_time_entry_sorting():
    entries = [
        make_entry("te1", duration=30, project_id="p2"),
        make_entry("te2", duration=90, project_id="p1"),
    ]
    projects = [make_project("p1", name="alpha"), make_project("p2", name="Beta")]

    by_duration = filter_service.filter_time_entries(entries, user_id="u1", sort_by="duration")
    by_project = filter_service.filter_time_entries(
        entries, projects=projects, user_id="u1", sort_by="project", order="asc"
    )

    assert [e.id for e in by_duration] == ["te2", "te1"]
    assert [e.id for e in by_project] == ["te2", "te1"]


def test_created_at_sort_handles_missing_timestamps():
    entries = [
        make_entry("te1"),
        make_entry("te2", created_at=datetime(2024, 5, 1, tzinfo=timezone.utc)),
    ]
    result = filter_service.filter_time_entries(entries, user_id="u1", sort_by="created_at")
    assert [e.id for e in result] == ["te2", "te1"]
