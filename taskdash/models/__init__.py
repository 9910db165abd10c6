"""Record schemas and validation."""
from .schemas import (
    AuthResponse,
    Client,
    DashboardStats,
    Invoice,
    InvoiceStatus,
    Notification,
    NotificationType,
    Priority,
    Profile,
    Project,
    ProjectStatus,
    Role,
    Task,
    TaskStatus,
    TimeEntry,
    parse_records,
)

__all__ = [
    "AuthResponse",
    "Client",
    "DashboardStats",
    "Invoice",
    "InvoiceStatus",
    "Notification",
    "NotificationType",
    "Priority",
    "Profile",
    "Project",
    "ProjectStatus",
    "Role",
    "Task",
    "TaskStatus",
    "TimeEntry",
    "parse_records",
]
