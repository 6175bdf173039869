"""
Task board schema: tasks, columns and the board projection.

Column order:
  TODO → IN_PROGRESS → REVIEW → DONE

Any status may move to any other status (no enforced workflow, no terminal state).
"""
import re
import time
import uuid
from enum import Enum
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Tuple, Union

TITLE_MAX_LENGTH = 100

_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


class ValidationError(Exception):
    """Raised when task fields fail form-level validation."""
    pass


class TaskStatus(Enum):
    """Board columns, one per task status."""
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"

    @classmethod
    def from_str(cls, value: Union[str, "TaskStatus"]) -> "TaskStatus":
        """Parse a status, accepting the legacy lowercase/hyphenated spelling.

        Raises ValueError for anything that is not one of the four columns.
        """
        if isinstance(value, TaskStatus):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid status: {value!r}")
        try:
            return cls[value.strip().upper().replace("-", "_")]
        except KeyError:
            raise ValueError(f"Invalid status: {value!r}") from None


class TaskPriority(Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_str(cls, value: Optional[str]) -> "TaskPriority":
        if isinstance(value, TaskPriority):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            return cls.MEDIUM


COLUMN_ORDER: Tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.REVIEW,
    TaskStatus.DONE,
)

COLUMN_TITLES: Dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.REVIEW: "Review",
    TaskStatus.DONE: "Done",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_task_id() -> str:
    """Generate a sortable local task ID (ms-precision timestamp + random hex)."""
    ts = int(time.time() * 1000)
    rand = uuid.uuid4().hex[:8]
    return f"task-{ts}-{rand}"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by the API (trailing 'Z' allowed).

    Fractional seconds of any length are padded or cut to microseconds.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: m.group(1) + "." + m.group(2)[:6].ljust(6, "0"), text)
    return datetime.fromisoformat(text)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Task:
    """One unit of work on the board."""

    # Identity
    id: str

    # Content
    title: str
    description: Optional[str] = None

    # Board placement
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM

    # Scheduling & ownership
    due_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    project_id: str = ""
    assignee: Optional[Dict[str, Any]] = None   # nested user as returned by the API
    project: Optional[Dict[str, Any]] = None    # nested project as returned by the API

    # Metadata
    created_at: Optional[datetime] = field(default_factory=utc_now)
    updated_at: Optional[datetime] = field(default_factory=utc_now)

    def with_status(self, status: TaskStatus) -> "Task":
        """Copy of this task placed in another column."""
        return replace(self, status=status)

    def assignee_id(self) -> Optional[str]:
        if self.assigned_to:
            return self.assigned_to
        if self.assignee:
            return self.assignee.get("id")
        return None

    def project_ref(self) -> Optional[str]:
        if self.project_id:
            return self.project_id
        if self.project:
            return self.project.get("id")
        return None

    def create_payload(self, status: Optional[TaskStatus] = None) -> Dict[str, Any]:
        """Body for POST /tasks."""
        return {
            "title": self.title,
            "description": self.description,
            "status": (status or self.status).value,
            "priority": self.priority.value,
            "dueDate": format_datetime(self.due_date),
            "projectId": self.project_ref(),
            "assignedTo": self.assignee_id(),
        }

    def update_payload(self) -> Dict[str, Any]:
        """Body for a full-field PATCH /tasks/{id} (edit form)."""
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": format_datetime(self.due_date),
            "assignedTo": self.assignee_id(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the API's camelCase shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "dueDate": format_datetime(self.due_date),
            "assignedTo": self.assigned_to,
            "projectId": self.project_id,
            "assignee": self.assignee,
            "project": self.project,
            "createdAt": format_datetime(self.created_at),
            "updatedAt": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize an API task object.

        Raises KeyError when the id is missing and ValueError for an unknown
        status or an unparseable timestamp; both mean a malformed payload.
        """
        project = data.get("project") or None
        project_id = data.get("projectId")
        if not project_id and isinstance(project, dict):
            project_id = project.get("id", "")

        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            description=data.get("description"),
            status=TaskStatus.from_str(data.get("status", "")),
            priority=TaskPriority.from_str(data.get("priority")),
            due_date=parse_datetime(data.get("dueDate")),
            assigned_to=data.get("assignedTo"),
            project_id=project_id or "",
            assignee=data.get("assignee") or None,
            project=project,
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


def validate_task_fields(title: str, project_id: str) -> str:
    """Form-level checks. Returns the stripped title."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title must be at most {TITLE_MAX_LENGTH} characters (got {len(title)})"
        )
    if not project_id:
        raise ValidationError("Project is required")
    return title


def new_task(
    title: str,
    project_id: str,
    status: TaskStatus = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.MEDIUM,
    description: Optional[str] = None,
    due_date: Optional[datetime] = None,
    assigned_to: Optional[str] = None,
) -> Task:
    """Synthesize a task locally, ready for BoardStore.add_task()."""
    title = validate_task_fields(title, project_id)
    return Task(
        id=make_task_id(),
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=due_date,
        assigned_to=assigned_to,
        project_id=project_id,
    )


@dataclass
class Column:
    """Ordered tasks sharing one status."""
    id: TaskStatus
    tasks: List[Task] = field(default_factory=list)

    @property
    def title(self) -> str:
        return COLUMN_TITLES[self.id]

    def index_of(self, task_id: str) -> int:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return -1

    def task_ids(self) -> List[str]:
        return [t.id for t in self.tasks]


@dataclass
class Board:
    """Client-side projection: the four status columns, always present."""
    columns: Dict[TaskStatus, Column] = field(default_factory=dict)

    def __post_init__(self):
        for status in COLUMN_ORDER:
            self.columns.setdefault(status, Column(id=status))
        # Keep display order stable regardless of how columns were supplied
        self.columns = {status: self.columns[status] for status in COLUMN_ORDER}

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "Board":
        """Bucket tasks into columns by status, keeping their input order."""
        board = cls()
        for task in tasks:
            board.columns[task.status].tasks.append(task)
        return board

    def column(self, column_id: Union[TaskStatus, str]) -> Column:
        return self.columns[TaskStatus.from_str(column_id)]

    def tasks(self) -> List[Task]:
        return [t for col in self.columns.values() for t in col.tasks]

    def find(self, task_id: str) -> Optional[Task]:
        for col in self.columns.values():
            for task in col.tasks:
                if task.id == task_id:
                    return task
        return None

    def copy(self) -> "Board":
        """Shallow structural copy: new column lists, same Task objects."""
        return Board({
            status: Column(id=status, tasks=list(col.tasks))
            for status, col in self.columns.items()
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            status.value: {
                "id": status.value,
                "title": col.title,
                "tasks": [t.to_dict() for t in col.tasks],
            }
            for status, col in self.columns.items()
        }
