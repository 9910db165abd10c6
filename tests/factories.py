"""Record builders shared by the test modules."""

from datetime import datetime, timezone

from taskdash.models.schemas import Client, Invoice, Notification, Profile, Project, Task, TimeEntry

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)  # a Wednesday


def make_profile(id="u1", **kw):
    data = {"id": id, "name": "Alex Johnson", "email": "alex@example.com", "role": "team_member"}
    data.update(kw)
    return Profile.model_validate(data)


def make_client(id="c1", **kw):
    data = {"id": id, "name": "Dana", "company": "Acme", "hourly_rate": 120}
    data.update(kw)
    return Client.model_validate(data)


def make_project(id="p1", **kw):
    data = {"id": id, "name": "Website", "owner_id": "u1", "monthly_hour_allocation": 40}
    data.update(kw)
    return Project.model_validate(data)


def make_task(id="t1", **kw):
    data = {"id": id, "title": "Write copy", "project_id": "p1", "assignee_id": "u1", "status": "todo"}
    data.update(kw)
    return Task.model_validate(data)


def make_entry(id="te1", **kw):
    data = {
        "id": id,
        "task_id": "t1",
        "project_id": "p1",
        "user_id": "u1",
        "date": "2024-05-15",
        "duration": 60,
        "description": "Drafting",
    }
    data.update(kw)
    return TimeEntry.model_validate(data)


def make_notification(id="n1", **kw):
    data = {"id": id, "user_id": "u1", "title": "Heads up", "message": "Deadline moved"}
    data.update(kw)
    return Notification.model_validate(data)


def make_invoice(id="i1", **kw):
    data = {
        "id": id,
        "client_id": "c1",
        "period_start": "2024-05-01",
        "period_end": "2024-05-31",
        "total_hours": 10,
        "hourly_rate": 120,
        "total": 1200,
    }
    data.update(kw)
    return Invoice.model_validate(data)
