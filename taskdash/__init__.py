"""
TaskDash - Project, task and time-tracking dashboard client.

Talks to the TaskDash REST backend and keeps the records it returns in an
in-memory snapshot for the dashboard layer.
"""

__version__ = "1.0.0"

# Only import the transport/identity layer by default
from .api_client import ApiClient, ApiError, UnauthorizedError
from .session import SessionManager, SessionStatus

__all__ = [
    "ApiClient",
    "ApiError",
    "UnauthorizedError",
    "SessionManager",
    "SessionStatus",
]
