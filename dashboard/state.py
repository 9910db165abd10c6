"""Application state container.

A single immutable snapshot of every collection the dashboard renders, plus
the reducer that derives the next snapshot from a tagged action. Nothing
outside ``reduce`` builds snapshots; consumers dispatch actions through
``Store``.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from taskdash.models.schemas import (
    Client,
    DashboardStats,
    Invoice,
    Notification,
    Profile,
    Project,
    Task,
    TimeEntry,
)


@dataclass(frozen=True)
class AppState:
    """Canonical in-memory snapshot."""

    profiles: Tuple[Profile, ...] = ()
    clients: Tuple[Client, ...] = ()
    projects: Tuple[Project, ...] = ()
    tasks: Tuple[Task, ...] = ()
    time_entries: Tuple[TimeEntry, ...] = ()
    invoices: Tuple[Invoice, ...] = ()
    notifications: Tuple[Notification, ...] = ()
    is_loading: bool = False
    dashboard_stats: Optional[DashboardStats] = None


class ActionType(str, Enum):
    SET_LOADING = "SET_LOADING"
    SET_PROFILES = "SET_PROFILES"
    SET_CLIENTS = "SET_CLIENTS"
    SET_PROJECTS = "SET_PROJECTS"
    SET_TASKS = "SET_TASKS"
    SET_TIME_ENTRIES = "SET_TIME_ENTRIES"
    SET_INVOICES = "SET_INVOICES"
    SET_NOTIFICATIONS = "SET_NOTIFICATIONS"
    SET_DASHBOARD_STATS = "SET_DASHBOARD_STATS"
    ADD_PROJECT = "ADD_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    ADD_TASK = "ADD_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    ADD_TIME_ENTRY = "ADD_TIME_ENTRY"
    ADD_CLIENT = "ADD_CLIENT"
    UPDATE_CLIENT = "UPDATE_CLIENT"
    ADD_INVOICE = "ADD_INVOICE"
    MARK_NOTIFICATION_READ = "MARK_NOTIFICATION_READ"


@dataclass(frozen=True)
class Action:
    """Tagged update. ``type`` is an ``ActionType`` or any other string."""

    type: str
    payload: Any = None


# Collection field touched by each action family
_SET_FIELDS: Dict[str, str] = {
    ActionType.SET_PROFILES.value: "profiles",
    ActionType.SET_CLIENTS.value: "clients",
    ActionType.SET_PROJECTS.value: "projects",
    ActionType.SET_TASKS.value: "tasks",
    ActionType.SET_TIME_ENTRIES.value: "time_entries",
    ActionType.SET_INVOICES.value: "invoices",
    ActionType.SET_NOTIFICATIONS.value: "notifications",
}

_ADD_FIELDS: Dict[str, str] = {
    ActionType.ADD_PROJECT.value: "projects",
    ActionType.ADD_TASK.value: "tasks",
    ActionType.ADD_TIME_ENTRY.value: "time_entries",
    ActionType.ADD_CLIENT.value: "clients",
    ActionType.ADD_INVOICE.value: "invoices",
}

_UPDATE_FIELDS: Dict[str, str] = {
    ActionType.UPDATE_PROJECT.value: "projects",
    ActionType.UPDATE_TASK.value: "tasks",
    ActionType.UPDATE_CLIENT.value: "clients",
}


def _replace_by_id(items: Tuple[Any, ...], updated: Any) -> Tuple[Any, ...]:
    if not any(item.id == updated.id for item in items):
        return items
    return tuple(updated if item.id == updated.id else item for item in items)


def _mark_read(items: Tuple[Notification, ...], notification_id: str) -> Tuple[Notification, ...]:
    if not any(n.id == notification_id for n in items):
        return items
    return tuple(
        n.model_copy(update={"read": True}) if n.id == notification_id else n for n in items
    )


def reduce(state: AppState, action: Action) -> AppState:
    """Return the snapshot that results from applying ``action`` to ``state``.

    Unknown action types return ``state`` itself. Updates whose id is not in
    the collection leave that collection untouched.
    """
    kind = action.type.value if isinstance(action.type, ActionType) else action.type
    if kind == ActionType.SET_LOADING:
        return replace(state, is_loading=bool(action.payload))
    if kind == ActionType.SET_DASHBOARD_STATS:
        return replace(state, dashboard_stats=action.payload)
    if kind in _SET_FIELDS:
        return replace(state, **{_SET_FIELDS[kind]: tuple(action.payload or ())})
    if kind in _ADD_FIELDS:
        field_name = _ADD_FIELDS[kind]
        return replace(state, **{field_name: getattr(state, field_name) + (action.payload,)})
    if kind in _UPDATE_FIELDS:
        field_name = _UPDATE_FIELDS[kind]
        return replace(state, **{field_name: _replace_by_id(getattr(state, field_name), action.payload)})
    if kind == ActionType.MARK_NOTIFICATION_READ:
        return replace(state, notifications=_mark_read(state.notifications, action.payload))
    return state


# -------------------- Action builders --------------------

def set_collection(kind: ActionType, items: Iterable[Any]) -> Action:
    return Action(kind, tuple(items))


def set_loading(is_loading: bool) -> Action:
    return Action(ActionType.SET_LOADING, is_loading)


def add(kind: ActionType, record: Any) -> Action:
    return Action(kind, record)


def update(kind: ActionType, record: Any) -> Action:
    """Replace the record with the same id; no-op when the id is unknown."""
    return Action(kind, record)


def remove_by_id(kind: ActionType, items: Iterable[Any], item_id: str) -> Action:
    """Deletion is a full collection replace without the removed record."""
    return Action(kind, tuple(item for item in items if item.id != item_id))


def mark_notification_read(notification_id: str) -> Action:
    return Action(ActionType.MARK_NOTIFICATION_READ, notification_id)


Listener = Callable[[AppState], None]


class Store:
    """Holds the current snapshot and serialises every update through ``dispatch``."""

    def __init__(self, initial: Optional[AppState] = None):
        self._state = initial or AppState()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        with self._lock:
            previous = self._state
            self._state = reduce(previous, action)
            current = self._state
        if current is not previous:
            for listener in list(self._listeners):
                listener(current)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        with self._lock:
            self._state = AppState()
        for listener in list(self._listeners):
            listener(self._state)
