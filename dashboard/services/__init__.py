from . import filter_service, stats_service, sync_service, timeline_service  # noqa: F401

from .clients import get_api_client
from .stats_service import StatsService, ProjectStats, MetricCard, percentage, project_stats
from .sync_service import load_all, reload_tasks
