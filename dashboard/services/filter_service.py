"""Filter helpers for the dashboard screens.

Every filter treats ``None`` and the ``"all"`` sentinel as "no constraint" and
returns a new list; the snapshot tuples are never reordered in place.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar

from dashboard.services.timeline_service import in_window
from taskdash.models.schemas import Profile, Project, Role, Task, TaskStatus, TimeEntry

ALL = "all"
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

T = TypeVar("T")


def _value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _matches(actual: Any, wanted: Any) -> bool:
    if wanted is None or wanted == ALL:
        return True
    return _value(actual) == _value(wanted)


def _contains(needle: str, *haystacks: Optional[str]) -> bool:
    needle = needle.lower()
    return any(needle in (text or "").lower() for text in haystacks)


def lookup(items: Sequence[T], item_id: Optional[str]) -> Optional[T]:
    """Find a record by id; dangling references return None."""
    return next((item for item in items if getattr(item, "id", None) == item_id), None)


def filter_tasks(
    tasks: Iterable[Task],
    status: Any = None,
    priority: Any = None,
    assignee: Optional[str] = None,
    project: Optional[str] = None,
    search: str = "",
) -> List[Task]:
    return [
        task
        for task in tasks
        if _matches(task.status, status)
        and _matches(task.priority, priority)
        and _matches(task.assignee_id, assignee)
        and _matches(task.project_id, project)
        and (not search or _contains(search, task.title, task.description))
    ]


def filter_projects(
    projects: Iterable[Project],
    search: str = "",
    status: Any = None,
    priority: Any = None,
) -> List[Project]:
    return [
        project
        for project in projects
        if (not search or _contains(search, project.name, project.description))
        and _matches(project.status, status)
        and _matches(project.priority, priority)
    ]


def tasks_by_status(tasks: Iterable[Task]) -> Dict[TaskStatus, List[Task]]:
    """Board columns, one per status, in workflow order."""
    columns: Dict[TaskStatus, List[Task]] = {status: [] for status in TaskStatus}
    for task in tasks:
        columns[TaskStatus(task.status)].append(task)
    return columns


def assignable_profiles(profiles: Iterable[Profile]) -> List[Profile]:
    """Everyone except client accounts can own projects and take tasks."""
    return [p for p in profiles if p.role != Role.CLIENT]


def available_timer_tasks(
    tasks: Iterable[Task],
    user_id: Optional[str],
    project_id: Optional[str] = None,
) -> List[Task]:
    """Tasks the user can track time against.

    Without a project: the user's open tasks. With a project: all of the
    user's tasks in that project.
    """
    if project_id:
        return [t for t in tasks if t.project_id == project_id and t.assignee_id == user_id]
    return [t for t in tasks if t.assignee_id == user_id and t.status != TaskStatus.DONE]


def _sort_key(sort_by: str, projects: Dict[str, Project]):
    if sort_by == "date":
        return lambda e: e.date
    if sort_by == "duration":
        return lambda e: e.duration
    if sort_by == "project":
        return lambda e: projects[e.project_id].name.lower() if e.project_id in projects else ""
    return lambda e: e.created_at or _EPOCH


def filter_time_entries(
    entries: Iterable[TimeEntry],
    tasks: Sequence[Task] = (),
    projects: Sequence[Project] = (),
    user_id: Optional[str] = None,
    date_filter: str = ALL,
    project: Optional[str] = None,
    search: str = "",
    sort_by: str = "date",
    order: str = "desc",
    today: Optional[date] = None,
) -> List[TimeEntry]:
    """Time entries for one user, windowed, searched and sorted."""
    task_index = {t.id: t for t in tasks}
    project_index = {p.id: p for p in projects}

    filtered = []
    for entry in entries:
        if entry.user_id != user_id:
            continue
        if not in_window(entry, date_filter, today):
            continue
        if not _matches(entry.project_id, project):
            continue
        if search:
            task = task_index.get(entry.task_id)
            owner = project_index.get(entry.project_id)
            if not _contains(
                search,
                entry.description,
                task.title if task else None,
                owner.name if owner else None,
            ):
                continue
        filtered.append(entry)

    filtered.sort(key=_sort_key(sort_by, project_index), reverse=(order != "asc"))
    return filtered
