"""Timeline services for time tracking.

Calendar windows (today / week / month), per-project weekly summaries and the
duration formatting shown next to logged time.

Note: backend timestamps are parsed as aware UTC datetimes. A naive ``now``
passed in by a caller is treated as UTC as well.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from taskdash.models.schemas import Project, TimeEntry

UNKNOWN_PROJECT = "Unknown Project"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    """Return an aware datetime; ``None`` means now, naive means UTC."""
    if moment is None:
        return utc_now()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _day(today: Optional[date]) -> date:
    if today is None:
        return utc_now().date()
    if isinstance(today, datetime):
        return today.date()
    return today


def week_bounds(today: Optional[date] = None) -> Tuple[date, date]:
    """Sunday..Saturday of the week containing ``today`` (inclusive)."""
    day = _day(today)
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(today: Optional[date] = None) -> Tuple[date, date]:
    day = _day(today)
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def in_window(entry: TimeEntry, window: str, today: Optional[date] = None) -> bool:
    """``today`` / ``week`` / ``month``; any other window matches everything."""
    day = _day(today)
    if window == "today":
        return entry.date == day
    if window == "week":
        start, end = week_bounds(day)
        return start <= entry.date <= end
    if window == "month":
        start, end = month_bounds(day)
        return start <= entry.date <= end
    return True


def total_hours(entries: Iterable[TimeEntry]) -> float:
    return sum(entry.duration for entry in entries) / 60


@dataclass(frozen=True)
class ProjectHours:
    project: str
    hours: float


def weekly_summary(
    entries: Iterable[TimeEntry],
    projects: Iterable[Project],
    user_id: Optional[str],
    today: Optional[date] = None,
) -> List[ProjectHours]:
    """Hours per project for ``user_id`` this week, largest first."""
    names: Dict[str, str] = {p.id: p.name for p in projects}
    minutes: Dict[str, int] = defaultdict(int)
    for entry in entries:
        if entry.user_id != user_id or not in_window(entry, "week", today):
            continue
        minutes[names.get(entry.project_id, UNKNOWN_PROJECT)] += entry.duration

    summary = [ProjectHours(project=name, hours=total / 60) for name, total in minutes.items()]
    summary.sort(key=lambda item: item.hours, reverse=True)
    return summary


def format_duration(seconds: int) -> str:
    """Elapsed timer display, ``HH:MM:SS``."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_hours(minutes: int) -> str:
    """Logged duration display: ``45m``, ``2h`` or ``1h 30m``."""
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"
