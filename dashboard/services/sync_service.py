"""Keeps the store in step with the backend.

``load_all`` is the bulk load run after sign-in: each collection is fetched
independently, so a failing endpoint leaves its collection empty while the
others still populate the snapshot. The write-through helpers call the
gateway first and only dispatch what the backend accepted. Duplicating or
archiving a project and editing logged time only touch the snapshot.
"""

from __future__ import annotations

import functools
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import ValidationError

from dashboard.state import Action, ActionType, Store, remove_by_id, set_collection, set_loading
from taskdash.api_client import ApiClient, ApiError
from taskdash.config import get_settings
from taskdash.models.schemas import (
    Client,
    DashboardStats,
    Profile,
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
    TimeEntry,
    parse_records,
)
from taskdash.utils.logger import get_logger

logger = get_logger(__name__)

# Collections fetched by the bulk load, and what a failed fetch leaves behind
_FETCHES: Dict[str, Callable[[ApiClient], Any]] = {
    "users": lambda c: c.get_users(),
    "clients": lambda c: c.get_clients(),
    "projects": lambda c: c.get_projects(),
    "tasks": lambda c: c.get_tasks(),
    "time_entries": lambda c: c.get_time_entries(),
    "dashboard_stats": lambda c: c.get_dashboard_stats(),
}
_FALLBACKS: Dict[str, Any] = {
    "users": [],
    "clients": [],
    "projects": [],
    "tasks": [],
    "time_entries": [],
    "dashboard_stats": None,
}


def _fetch(name: str, client: ApiClient) -> Any:
    try:
        return _FETCHES[name](client)
    except (ApiError, ValueError) as exc:
        logger.warning("Could not load %s: %s", name, exc)
        return _FALLBACKS[name]


def _parse_stats(raw: Any) -> Optional[DashboardStats]:
    if not raw:
        return None
    try:
        return DashboardStats.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Ignoring malformed dashboard stats: %s", exc)
        return None


def load_all(client: ApiClient, store: Store, max_workers: Optional[int] = None) -> Optional[Profile]:
    """Fetch every collection concurrently and publish the results.

    Returns:
        The current identity, or None when it could not be fetched
    """
    store.dispatch(set_loading(True))
    try:
        workers = max_workers or get_settings().max_workers
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="taskdash-load") as pool:
            futures = {name: pool.submit(_fetch, name, client) for name in _FETCHES}
            results = {name: future.result() for name, future in futures.items()}

        store.dispatch(set_collection(ActionType.SET_PROFILES, parse_records(Profile, results["users"])))
        store.dispatch(set_collection(ActionType.SET_CLIENTS, parse_records(Client, results["clients"])))
        store.dispatch(set_collection(ActionType.SET_PROJECTS, parse_records(Project, results["projects"])))
        store.dispatch(set_collection(ActionType.SET_TASKS, parse_records(Task, results["tasks"])))
        store.dispatch(
            set_collection(ActionType.SET_TIME_ENTRIES, parse_records(TimeEntry, results["time_entries"]))
        )
        store.dispatch(Action(ActionType.SET_DASHBOARD_STATS, _parse_stats(results["dashboard_stats"])))
        logger.info(
            "Loaded %d projects, %d tasks, %d time entries",
            len(store.state.projects),
            len(store.state.tasks),
            len(store.state.time_entries),
        )

        try:
            return Profile.model_validate(client.get_current_user())
        except (ApiError, ValidationError) as exc:
            logger.error("Error getting current user: %s", exc)
            return None
    finally:
        store.dispatch(set_loading(False))


def reload_tasks(client: ApiClient, store: Store, filters: Optional[Mapping[str, Any]] = None) -> bool:
    """Re-fetch tasks with server-side filters. Returns False if the fetch failed."""
    store.dispatch(set_loading(True))
    try:
        tasks = parse_records(Task, client.get_tasks(filters))
    except ApiError as exc:
        logger.error("Error loading tasks: %s", exc)
        return False
    else:
        store.dispatch(set_collection(ActionType.SET_TASKS, tasks))
        return True
    finally:
        store.dispatch(set_loading(False))


# -------------------- Write-through --------------------

def _logged(fn):
    """Log gateway failures of a write-through helper before re-raising them."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (ApiError, ValidationError) as exc:
            logger.error("Error in %s: %s", fn.__name__, exc)
            raise

    return wrapper


@_logged
def create_task(client: ApiClient, store: Store, task: Any) -> Task:
    created = Task.model_validate(client.create_task(task))
    store.dispatch(Action(ActionType.ADD_TASK, created))
    return created


@_logged
def save_task(client: ApiClient, store: Store, task: Task) -> Task:
    """Send ``task`` (already merged by the caller) and replace it by id."""
    saved = Task.model_validate(client.update_task(task.id, task))
    store.dispatch(Action(ActionType.UPDATE_TASK, saved))
    return saved


@_logged
def delete_task(client: ApiClient, store: Store, task_id: str) -> None:
    client.delete_task(task_id)
    store.dispatch(remove_by_id(ActionType.SET_TASKS, store.state.tasks, task_id))


@_logged
def create_project(client: ApiClient, store: Store, project: Any) -> Project:
    created = Project.model_validate(client.create_project(project))
    store.dispatch(Action(ActionType.ADD_PROJECT, created))
    return created


@_logged
def save_project(client: ApiClient, store: Store, project: Project) -> Project:
    saved = Project.model_validate(client.update_project(project.id, project))
    store.dispatch(Action(ActionType.UPDATE_PROJECT, saved))
    return saved


@_logged
def delete_project(client: ApiClient, store: Store, project_id: str) -> None:
    client.delete_project(project_id)
    store.dispatch(remove_by_id(ActionType.SET_PROJECTS, store.state.projects, project_id))


@_logged
def log_time_entry(client: ApiClient, store: Store, entry: Any) -> TimeEntry:
    created = TimeEntry.model_validate(client.create_time_entry(entry))
    store.dispatch(Action(ActionType.ADD_TIME_ENTRY, created))
    return created


@_logged
def change_task_status(client: ApiClient, store: Store, task_id: str, status: Any) -> Task:
    """Partial update: only the status is sent, the backend returns the full task."""
    value = status.value if isinstance(status, TaskStatus) else status
    saved = Task.model_validate(client.update_task(task_id, {"status": value}))
    store.dispatch(Action(ActionType.UPDATE_TASK, saved))
    return saved


# -------------------- Local-only edits --------------------

def duplicate_project(store: Store, project: Project) -> Project:
    """Add a not-started copy of ``project`` under a fresh ``p<millis>`` id."""
    now = datetime.now(timezone.utc)
    copy = project.model_copy(
        update={
            "id": f"p{int(time.time() * 1000)}",
            "name": f"{project.name} (Copy)",
            "status": ProjectStatus.NOT_STARTED,
            "created_at": now,
            "updated_at": now,
        }
    )
    store.dispatch(Action(ActionType.ADD_PROJECT, copy))
    return copy


def archive_project(store: Store, project: Project) -> Project:
    archived = project.model_copy(
        update={"status": ProjectStatus.CANCELLED, "updated_at": datetime.now(timezone.utc)}
    )
    store.dispatch(Action(ActionType.UPDATE_PROJECT, archived))
    return archived


def edit_time_entry(store: Store, entry: TimeEntry) -> None:
    """Swap in the edited entry; time entries have no UPDATE action."""
    entries = tuple(entry if e.id == entry.id else e for e in store.state.time_entries)
    store.dispatch(set_collection(ActionType.SET_TIME_ENTRIES, entries))


def delete_time_entry(store: Store, entry_id: str) -> None:
    store.dispatch(remove_by_id(ActionType.SET_TIME_ENTRIES, store.state.time_entries, entry_id))
