"""Pydantic schemas to validate records returned by the TaskDash backend.

These schemas act as contracts at ingress points so we fail fast when
backend payloads change shape. Unknown keys are kept (``extra="allow"``) so
nested expansions such as ``task.assignee`` or ``project.client`` survive.
All records are frozen: the dashboard snapshot is never edited in place.
"""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from taskdash.utils.logger import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    PROJECT_MANAGER = "project_manager"
    TEAM_MEMBER = "team_member"
    CLIENT = "client"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskStatus(str, Enum):
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse backend timestamps into aware UTC datetimes.

    Naive values are treated as UTC; date-only strings become midnight.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_day(value: Any) -> Any:
    """Accept ``YYYY-MM-DD`` as well as full ISO timestamps for calendar days."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return date.fromisoformat(value[:10])
    return value


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: str
    created_at: Optional[datetime] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, v):
        return parse_timestamp(v)


def _non_blank(v: str, label: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{label} cannot be empty")
    return v.strip()


class Profile(Record):
    name: str
    email: str
    role: Role = Role.TEAM_MEMBER
    avatar: Optional[str] = None
    weekly_capacity: float = Field(default=40, ge=0)
    is_active: bool = True
    updated_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def name_nonempty(cls, v: str) -> str:
        return _non_blank(v, "Profile name")

    @field_validator("updated_at", mode="before")
    @classmethod
    def _updated_at(cls, v):
        return parse_timestamp(v)


class Client(Record):
    name: str
    email: str = ""
    company: str = ""
    hourly_rate: float = Field(default=0, ge=0)
    is_active: bool = True
    updated_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def name_nonempty(cls, v: str) -> str:
        return _non_blank(v, "Client name")

    @field_validator("updated_at", mode="before")
    @classmethod
    def _updated_at(cls, v):
        return parse_timestamp(v)


class Project(Record):
    name: str
    description: str = ""
    client_id: Optional[str] = None
    owner_id: str
    priority: Priority = Priority.MEDIUM
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    deadline: Optional[datetime] = None
    monthly_hour_allocation: float = Field(default=0, ge=0)
    tags: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def name_nonempty(cls, v: str) -> str:
        return _non_blank(v, "Project name")

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, v):
        return v or ""

    @field_validator("tags", mode="before")
    @classmethod
    def tags_default(cls, v):
        return v or []

    @field_validator("deadline", "updated_at", mode="before")
    @classmethod
    def _timestamps(cls, v):
        return parse_timestamp(v)


class Task(Record):
    title: str
    description: str = ""
    project_id: str
    assignee_id: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.BACKLOG
    estimated_hours: float = Field(default=0, ge=0)
    due_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_nonempty(cls, v: str) -> str:
        return _non_blank(v, "Task title")

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, v):
        return v or ""

    @field_validator("due_date", "updated_at", mode="before")
    @classmethod
    def _timestamps(cls, v):
        return parse_timestamp(v)


class TimeEntry(Record):
    task_id: str
    project_id: str
    user_id: str
    date: date
    duration: int = Field(ge=0, description="Minutes")
    description: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _day(cls, v):
        return parse_day(v)

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, v):
        return v or ""


class Invoice(Record):
    client_id: str
    period_start: date
    period_end: date
    total_hours: float = Field(default=0, ge=0)
    hourly_rate: float = Field(default=0, ge=0)
    subtotal: float = 0
    tax: float = 0
    total: float = 0
    status: InvoiceStatus = InvoiceStatus.DRAFT
    updated_at: Optional[datetime] = None

    @field_validator("period_start", "period_end", mode="before")
    @classmethod
    def _days(cls, v):
        return parse_day(v)

    @field_validator("period_end")
    @classmethod
    def end_after_start(cls, v: date, info):
        start = info.data.get("period_start")
        if start is not None and v < start:
            raise ValueError("period_end must be >= period_start")
        return v

    @field_validator("updated_at", mode="before")
    @classmethod
    def _updated_at(cls, v):
        return parse_timestamp(v)


class Notification(Record):
    user_id: str
    title: str = ""
    message: str = ""
    type: NotificationType = NotificationType.INFO
    read: bool = False


class DashboardStats(BaseModel):
    """Server-side counters from ``GET /dashboard/stats``."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    total_tasks: int = Field(default=0, ge=0, alias="totalTasks")
    completed_tasks: int = Field(default=0, ge=0, alias="completedTasks")
    today_completed_tasks: int = Field(default=0, ge=0, alias="todayCompletedTasks")
    overdue_tasks: int = Field(default=0, ge=0, alias="overdueTasks")
    at_risk_tasks: int = Field(default=0, ge=0, alias="atRiskTasks")


class AuthResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    token: str
    user: Profile


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_records(model: Type[ModelT], raw: Optional[Iterable[Any]]) -> List[ModelT]:
    """Validate a raw collection, skipping records that do not match ``model``."""
    if not raw:
        return []
    parsed: List[ModelT] = []
    for item in raw:
        try:
            parsed.append(model.model_validate(item))
        except ValidationError as exc:
            record_id = item.get("id") if isinstance(item, dict) else None
            logger.warning(
                "Skipping malformed %s record %s: %s",
                model.__name__,
                record_id,
                exc.errors()[0].get("msg") if exc.errors() else exc,
            )
    return parsed
