"""Log sink for dashboard events (navigation, session expiry, logged time).

Messages go to the ``taskdash.dashboard`` logger without touching the root
configuration, so tests that build a ``DashboardApp`` stay quiet.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("taskdash.dashboard")


def log(message: str, level: int = logging.INFO) -> None:
    logger.log(level, message)


def log_view_change(previous: str, current: str) -> None:
    if previous != current:
        logger.debug("View %s -> %s", previous, current)
