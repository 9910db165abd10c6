"""
TaskDash API Client - Authenticated access to the TaskDash REST backend.

Every call returns the raw JSON records; validation happens where the
records enter the dashboard snapshot (see ``taskdash.models.schemas``).
"""
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests
from pydantic import BaseModel

from .config import get_settings
from .token_store import TokenStore
from .utils.logger import get_logger

logger = get_logger(__name__)

Payload = Any
UnauthorizedHook = Callable[[str], None]


class ApiError(Exception):
    """Non-2xx response (or transport failure, with ``status_code`` 0)."""

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"API Error: {status_code} {reason}".rstrip())


class UnauthorizedError(ApiError):
    """The backend rejected the stored credential (HTTP 401)."""


def _param_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_query(filters: Optional[Mapping[str, Any]], skip_all: bool = True) -> Dict[str, str]:
    """Drop falsy filters (and the ``"all"`` sentinel) before they hit the query string."""
    params: Dict[str, str] = {}
    for key, value in (filters or {}).items():
        if not value:
            continue
        text = _param_value(value)
        if skip_all and text == "all":
            continue
        params[key] = text
    return params


def _body(data: Payload) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    return dict(data)


class ApiClient:
    """
    Client for the TaskDash backend.

    Provides methods to:
    - Sign in / register / fetch the current identity
    - List, create, update and delete tasks and projects
    - List users, clients and time entries, log time
    - Fetch dashboard counters
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        on_unauthorized: Optional[UnauthorizedHook] = None,
        timeout: Optional[float] = None,
        login_path: Optional[str] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Backend root, e.g. ``http://localhost:8000/api``
            token_store: Credential slot (auto-created if not provided)
            on_unauthorized: Navigation hook called with the login path on a 401
            timeout: Per-request timeout in seconds
            login_path: Login boundary handed to ``on_unauthorized``
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.tokens = token_store or TokenStore()
        self.on_unauthorized = on_unauthorized
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.login_path = login_path or settings.login_path

    # -------------------- Credential --------------------
    @property
    def token(self) -> Optional[str]:
        return self.tokens.token

    def set_token(self, token: str) -> None:
        self.tokens.save(token)

    def clear_token(self) -> None:
        self.tokens.clear()

    def _get_headers(self) -> dict:
        """Get headers for API requests, with the bearer credential when present."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
    ) -> Any:
        """
        Make an API request.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            params: Query string parameters
            json: JSON request body

        Returns:
            Response JSON data, or None for an empty body
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.request(
                method,
                url,
                headers=self._get_headers(),
                params=params or None,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, endpoint, exc)
            raise ApiError(0, str(exc)) from exc

        if not response.ok:
            if response.status_code == 401:
                logger.info("Credential rejected on %s %s, signing out", method, endpoint)
                self.clear_token()
                if self.on_unauthorized is not None:
                    self.on_unauthorized(self.login_path)
                raise UnauthorizedError(response.status_code, response.reason)
            raise ApiError(response.status_code, response.reason)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.error("%s %s returned a non-JSON body: %s", method, endpoint, exc)
            raise ApiError(response.status_code, "Invalid JSON body") from exc

    # -------------------- Auth --------------------
    def login(self, email: str, password: str) -> dict:
        return self._request("POST", "/auth/login", json={"email": email, "password": password})

    def register(self, name: str, email: str, password: str) -> dict:
        return self._request(
            "POST", "/auth/register", json={"name": name, "email": email, "password": password}
        )

    def get_current_user(self) -> dict:
        """Get the profile behind the stored credential."""
        return self._request("GET", "/auth/me")

    # -------------------- Tasks --------------------
    def get_tasks(self, filters: Optional[Mapping[str, Any]] = None) -> List[dict]:
        """
        List tasks.

        Args:
            filters: Optional ``status``, ``priority``, ``assignee``, ``project``;
                ``"all"`` means no filter

        Returns:
            Raw task records
        """
        return self._request("GET", "/tasks", params=build_query(filters)) or []

    def create_task(self, task: Payload) -> dict:
        return self._request("POST", "/tasks", json=_body(task))

    def update_task(self, task_id: str, updates: Payload) -> dict:
        return self._request("PUT", f"/tasks/{task_id}", json=_body(updates))

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/tasks/{task_id}")

    # -------------------- Projects --------------------
    def get_projects(self, filters: Optional[Mapping[str, Any]] = None) -> List[dict]:
        """List projects, optionally filtered by ``status`` / ``priority``."""
        return self._request("GET", "/projects", params=build_query(filters)) or []

    def create_project(self, project: Payload) -> dict:
        return self._request("POST", "/projects", json=_body(project))

    def update_project(self, project_id: str, updates: Payload) -> dict:
        return self._request("PUT", f"/projects/{project_id}", json=_body(updates))

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/projects/{project_id}")

    # -------------------- Dashboard --------------------
    def get_dashboard_stats(self) -> dict:
        return self._request("GET", "/dashboard/stats")

    def get_today_tasks(self) -> List[dict]:
        return self._request("GET", "/dashboard/today-tasks") or []

    # -------------------- Team / clients / time --------------------
    def get_users(self) -> List[dict]:
        return self._request("GET", "/users") or []

    def get_clients(self) -> List[dict]:
        return self._request("GET", "/clients") or []

    def get_time_entries(self, filters: Optional[Mapping[str, Any]] = None) -> List[dict]:
        """List time entries; any non-empty filter value is forwarded as-is."""
        return self._request("GET", "/time-entries", params=build_query(filters, skip_all=False)) or []

    def create_time_entry(self, entry: Payload) -> dict:
        return self._request("POST", "/time-entries", json=_body(entry))
