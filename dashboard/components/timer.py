"""Elapsed-time tracker for live time tracking.

While a session is running a daemon thread reads the clock once per
interval and reports the elapsed seconds to ``on_tick``. Stopping the session
ends the thread and turns the elapsed time into a time-entry payload.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional

TickCallback = Callable[[int], None]


@dataclass(frozen=True)
class ActiveTimer:
    task_id: str
    project_id: str
    description: str
    started_at: float


class TrackingTimer:
    """Tracks one session at a time.

    ``clock`` returns seconds (``time.time`` by default) so tests can drive it.
    """

    def __init__(
        self,
        on_tick: Optional[TickCallback] = None,
        interval: float = 1.0,
        clock: Callable[[], float] = time.time,
    ):
        self.on_tick = on_tick
        self.interval = interval
        self.clock = clock
        self.active: Optional[ActiveTimer] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self.active is not None

    def start(self, task_id: str, project_id: str, description: str = "") -> ActiveTimer:
        if not task_id or not project_id:
            raise ValueError("A task and a project are required to start the timer")
        if self.is_running:
            self.stop()

        self.active = ActiveTimer(
            task_id=task_id,
            project_id=project_id,
            description=description or "Timer session",
            started_at=self.clock(),
        )
        self._stop = threading.Event()
        if self.on_tick is not None:
            self._thread = threading.Thread(
                target=self._run, args=(self._stop,), name="taskdash-timer", daemon=True
            )
            self._thread.start()
        return self.active

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            if self.active is None:
                return
            self.on_tick(self.elapsed_seconds())

    def elapsed_seconds(self) -> int:
        if self.active is None:
            return 0
        return max(0, int(self.clock() - self.active.started_at))

    def stop(self) -> Optional[Dict[str, Any]]:
        """End the session.

        Returns:
            A time-entry payload (whole minutes), or None if nothing was running
            or less than a minute elapsed
        """
        if self.active is None:
            return None

        active = self.active
        minutes = self.elapsed_seconds() // 60
        self.active = None
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval * 2)
        self._thread = None

        if minutes <= 0:
            return None
        return {
            "task_id": active.task_id,
            "project_id": active.project_id,
            "date": date.today().isoformat(),
            "duration": minutes,
            "description": active.description,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
