"""Stats service used by the dashboard.

Pure aggregate computations over a snapshot: completion rates, overdue and
at-risk counts, hour totals against project allocations. Nothing here mutates
the records it reads, and every percentage is 0 when its denominator is 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from dashboard.services.timeline_service import as_utc, week_bounds
from dashboard.state import AppState
from taskdash.models.schemas import DashboardStats, Project, Task, TaskStatus, TimeEntry

# Hour usage colour thresholds (percent of monthly allocation)
USAGE_WARNING_THRESHOLD = 80
USAGE_OVER_THRESHOLD = 100
AT_RISK_WINDOW_DAYS = 2


def percentage(part: float, whole: float) -> float:
    """``part / whole * 100``, defined as 0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return part / whole * 100


def minutes_to_hours(minutes: float) -> float:
    return minutes / 60


def total_minutes(entries: Iterable[TimeEntry]) -> int:
    return sum(entry.duration for entry in entries)


def task_time_spent(task_id: str, entries: Iterable[TimeEntry]) -> float:
    """Hours logged against one task."""
    return minutes_to_hours(total_minutes(e for e in entries if e.task_id == task_id))


def subtask_counts(task: Task) -> Tuple[int, int]:
    """``(completed, total)`` over the optional ``subtasks`` list the backend may expand."""
    subtasks = (task.model_extra or {}).get("subtasks") or []
    done = sum(1 for st in subtasks if isinstance(st, dict) and st.get("completed"))
    return done, len(subtasks)


def subtask_progress(task: Task) -> float:
    done, total = subtask_counts(task)
    return percentage(done, total)


def is_overdue(task: Task, now: Optional[datetime] = None) -> bool:
    """Due date strictly before ``now`` and not done."""
    if task.due_date is None or task.status == TaskStatus.DONE:
        return False
    return as_utc(task.due_date) < as_utc(now)


def days_until_due(task: Task, now: Optional[datetime] = None) -> Optional[int]:
    if task.due_date is None:
        return None
    delta = as_utc(task.due_date) - as_utc(now)
    return math.ceil(delta / timedelta(days=1))


def is_at_risk(task: Task, now: Optional[datetime] = None) -> bool:
    """Due within 0..2 days (rounded up) and not done."""
    if task.status == TaskStatus.DONE:
        return False
    days = days_until_due(task, now)
    return days is not None and 0 <= days <= AT_RISK_WINDOW_DAYS


@dataclass(frozen=True)
class ProjectStats:
    completed_tasks: int = 0
    total_tasks: int = 0
    total_hours: float = 0.0
    monthly_hour_allocation: float = 0.0

    @property
    def progress_percentage(self) -> float:
        return percentage(self.completed_tasks, self.total_tasks)

    @property
    def hour_usage_percentage(self) -> float:
        """Unclamped; drives the usage colour."""
        return percentage(self.total_hours, self.monthly_hour_allocation)

    @property
    def hour_bar_width(self) -> float:
        return min(self.hour_usage_percentage, 100.0)

    @property
    def usage_level(self) -> str:
        usage = self.hour_usage_percentage
        if usage > USAGE_OVER_THRESHOLD:
            return "over"
        if usage > USAGE_WARNING_THRESHOLD:
            return "warning"
        return "ok"

    @property
    def tasks_label(self) -> str:
        return f"{self.completed_tasks}/{self.total_tasks} tasks"

    @property
    def hours_label(self) -> str:
        return f"{round(self.total_hours)}/{self.monthly_hour_allocation:g}h"


def project_stats(
    project: Project,
    tasks: Iterable[Task],
    entries: Iterable[TimeEntry],
) -> ProjectStats:
    project_tasks = [t for t in tasks if t.project_id == project.id]
    return ProjectStats(
        completed_tasks=sum(1 for t in project_tasks if t.status == TaskStatus.DONE),
        total_tasks=len(project_tasks),
        total_hours=minutes_to_hours(total_minutes(e for e in entries if e.project_id == project.id)),
        monthly_hour_allocation=project.monthly_hour_allocation,
    )


def compute_dashboard_stats(
    tasks: Iterable[Task],
    user_id: Optional[str],
    now: Optional[datetime] = None,
) -> DashboardStats:
    """Local fallback for ``GET /dashboard/stats``, scoped to one assignee."""
    user_tasks = [t for t in tasks if t.assignee_id == user_id]
    return DashboardStats(
        total_tasks=len(user_tasks),
        completed_tasks=sum(1 for t in user_tasks if t.status == TaskStatus.DONE),
        overdue_tasks=sum(1 for t in user_tasks if is_overdue(t, now)),
        at_risk_tasks=0,
    )


def completion_rate(stats: DashboardStats) -> float:
    return percentage(stats.completed_tasks, stats.total_tasks)


def sprint_completion(tasks: Iterable[Task], now: Optional[datetime] = None) -> int:
    """Rounded completion percentage of tasks created this week."""
    first, _ = week_bounds(as_utc(now).date())
    start = datetime(first.year, first.month, first.day, tzinfo=timezone.utc)
    end = start + timedelta(days=7)
    sprint = [t for t in tasks if t.created_at is not None and start <= as_utc(t.created_at) < end]
    done = sum(1 for t in sprint if t.status == TaskStatus.DONE)
    return round(percentage(done, len(sprint)))


@dataclass(frozen=True)
class MetricCard:
    title: str
    value: str
    description: str
    progress: Optional[float] = None
    alert: bool = False


def status_overview(
    state: AppState,
    user_id: Optional[str],
    stats: Optional[DashboardStats] = None,
    now: Optional[datetime] = None,
) -> List[MetricCard]:
    """Metric cards for the dashboard status panel.

    ``stats`` defaults to the snapshot's server counters, falling back to
    counts computed from the snapshot when the backend provided none.
    """
    stats = stats or state.dashboard_stats or compute_dashboard_stats(state.tasks, user_id, now)
    at_risk = sum(1 for t in state.tasks if is_at_risk(t, now))
    flagged = at_risk + stats.overdue_tasks
    rate = completion_rate(stats)
    sprint = sprint_completion(state.tasks, now)
    return [
        MetricCard("Total Assigned", str(stats.total_tasks), "Active tasks"),
        MetricCard(
            "At Risk",
            str(flagged),
            f"{stats.overdue_tasks} overdue, {at_risk} due soon",
            alert=flagged > 0,
        ),
        MetricCard(
            "Completion Rate",
            f"{round(rate)}%",
            f"{stats.completed_tasks} of {stats.total_tasks} completed",
            progress=rate,
        ),
        MetricCard("Sprint Progress", f"{sprint}%", "Current sprint completion", progress=sprint),
    ]


class StatsService:
    """Caches derived dashboard figures for the snapshot they were computed from."""

    def __init__(self):
        self._cache: Dict[str, object] = {}
        self._snapshot: Optional[AppState] = None

    def invalidate_cache(self) -> None:
        self._cache = {}
        self._snapshot = None

    def _for(self, state: AppState) -> Dict[str, object]:
        if state is not self._snapshot:
            self._cache = {}
            self._snapshot = state
        return self._cache

    def get_overview(
        self, state: AppState, user_id: Optional[str], now: Optional[datetime] = None
    ) -> List[MetricCard]:
        # Not cached: overdue and at-risk counts move with the clock
        return status_overview(state, user_id, now=now)

    def get_project_stats(self, state: AppState, project: Project) -> ProjectStats:
        cache = self._for(state)
        key = f"project:{project.id}"
        if key not in cache:
            cache[key] = project_stats(project, state.tasks, state.time_entries)
        return cache[key]  # type: ignore[return-value]

    def get_all_project_stats(self, state: AppState) -> Dict[str, ProjectStats]:
        return {p.id: self.get_project_stats(state, p) for p in state.projects}

