"""Main dashboard application object.

Wires the credential slot, the backend client, the store and the session
together, and owns the small amount of UI-facing state (active view, live
timer) that is not part of the data snapshot.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from dashboard.components.timer import TrackingTimer
from dashboard.services.clients import get_api_client
from dashboard.services.stats_service import MetricCard, StatsService
from dashboard.services.sync_service import load_all
from dashboard.services.timeline_service import format_duration
from dashboard.state import Action, ActionType, Store
from dashboard.utils.logging import log, log_view_change
from taskdash.api_client import ApiClient
from taskdash.models.schemas import Profile, TimeEntry
from taskdash.session import AuthResult, SessionManager

VIEWS = (
    "login",
    "dashboard",
    "projects",
    "tasks",
    "time",
    "team",
    "invoices",
    "clients",
    "settings",
)


class DashboardApp:
    """App shell: one store, one session, one live timer."""

    def __init__(self, client: Optional[ApiClient] = None, store: Optional[Store] = None):
        self.client = client or get_api_client()
        self.client.on_unauthorized = self._on_unauthorized
        self.store = store or Store()
        self.session = SessionManager(self.client, on_authenticated=self._on_authenticated)
        self.stats = StatsService()
        self.timer = TrackingTimer(on_tick=self._on_tick)
        self.current_view = "login"
        self.current_user: Optional[Profile] = None
        self.elapsed_display = format_duration(0)

    # -------------------- Session --------------------
    def start(self) -> None:
        """Restore a stored session, if any."""
        self.session.restore()
        self.current_view = "dashboard" if self.session.is_authenticated else "login"

    def sign_in(self, email: str, password: str) -> AuthResult:
        result = self.session.sign_in(email, password)
        if result.ok:
            self.current_view = "dashboard"
        return result

    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        result = self.session.sign_up(email, password, name)
        if result.ok:
            self.current_view = "dashboard"
        return result

    def sign_out(self) -> None:
        self.timer.stop()
        self.session.sign_out()
        self.store.reset()
        self.stats.invalidate_cache()
        self.current_user = None
        self.current_view = "login"

    def _on_authenticated(self, user: Profile) -> None:
        self.current_user = user
        refreshed = load_all(self.client, self.store)
        if refreshed is not None:
            self.current_user = refreshed

    def _on_unauthorized(self, login_path: str) -> None:
        log(f"Session rejected, returning to {login_path}", logging.WARNING)
        self.timer.stop()
        self.session.expire()
        self.current_user = None
        self.current_view = "login"

    # -------------------- Navigation --------------------
    def switch_view(self, view_name: str) -> None:
        """Switch the active view."""
        if view_name not in VIEWS:
            raise ValueError(f"Unknown view: {view_name}")
        log_view_change(self.current_view, view_name)
        self.current_view = view_name

    def overview(self) -> List[MetricCard]:
        user_id = self.current_user.id if self.current_user else None
        return self.stats.get_overview(self.store.state, user_id)

    # -------------------- Time tracking --------------------
    def _on_tick(self, seconds: int) -> None:
        self.elapsed_display = format_duration(seconds)

    def start_timer(self, task_id: str, project_id: str, description: str = "") -> None:
        self.timer.start(task_id, project_id, description)
        self.elapsed_display = format_duration(0)

    def stop_timer(self) -> Optional[TimeEntry]:
        """Stop tracking and record the session as a time entry (whole minutes)."""
        payload = self.timer.stop()
        self.elapsed_display = format_duration(0)
        if payload is None or self.current_user is None:
            return None

        entry = TimeEntry.model_validate(
            {**payload, "id": f"te{int(time.time() * 1000)}", "user_id": self.current_user.id}
        )
        self.store.dispatch(Action(ActionType.ADD_TIME_ENTRY, entry))
        log(f"Logged {entry.duration} min on task {entry.task_id}")
        return entry
