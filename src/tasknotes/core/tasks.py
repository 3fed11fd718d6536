"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Callable

from tasknotes.errors import ValidationError

DUE_SOON_WINDOW = timedelta(hours=24)


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    OTHER = "other"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Sort rank: high=3, medium=2, low=1."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class All(Enum):
    """Match-everything selector for the category and priority filters."""

    ALL = "all"


ALL = All.ALL


class SortMode(str, Enum):
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    CREATED = "created"


class DueStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due-soon"
    NORMAL = "normal"


def _now() -> datetime:
    return datetime.now()


@dataclass
class Task:
    """A to-do record."""

    id: str
    title: str
    description: str = ""
    category: Category = Category.OTHER
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    completed: bool = False
    created_at: datetime = field(default_factory=_now)

    def due_status(self, now: datetime | None = None, window: timedelta = DUE_SOON_WINDOW) -> "DueStatus":
        return classify_due(self, now, window)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title or description."""
        needle = query.strip().lower()
        if not needle:
            return True
        return needle in self.title.lower() or needle in self.description.lower()

    @classmethod
    def from_api(cls, data: dict) -> "Task":
        """Create Task from a backend row."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description") or "",
            category=parse_category(data.get("category") or Category.OTHER),
            priority=parse_priority(data.get("priority") or Priority.MEDIUM),
            due_date=parse_timestamp(data.get("due_date")),
            completed=bool(data.get("completed", False)),
            created_at=parse_timestamp(data.get("created_at")) or _now(),
        )

    def to_api(self) -> dict:
        """Serialize to the backend row shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority.value,
            "due_date": format_timestamp(self.due_date) if self.due_date else None,
            "completed": self.completed,
            "created_at": format_timestamp(self.created_at),
        }


# ============== Entry boundary ==============


def parse_category(value: "Category | str") -> Category:
    """Parse a category, rejecting anything outside the enumeration."""
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(c.value for c in Category)
        raise ValidationError("category", f"Invalid category '{value}' (expected one of: {choices})")


def parse_priority(value: "Priority | str") -> Priority:
    """Parse a priority, rejecting anything outside the enumeration."""
    if isinstance(value, Priority):
        return value
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in Priority)
        raise ValidationError("priority", f"Invalid priority '{value}' (expected one of: {choices})")


def parse_category_filter(value: "Category | All | str") -> "Category | All":
    if value is ALL or str(value).strip().lower() == ALL.value:
        return ALL
    return parse_category(value)


def parse_priority_filter(value: "Priority | All | str") -> "Priority | All":
    if value is ALL or str(value).strip().lower() == ALL.value:
        return ALL
    return parse_priority(value)


def parse_sort_mode(value: "SortMode | str") -> SortMode:
    if isinstance(value, SortMode):
        return value
    try:
        return SortMode(str(value).strip())
    except ValueError:
        choices = ", ".join(m.value for m in SortMode)
        raise ValidationError("sort", f"Invalid sort mode '{value}' (expected one of: {choices})")


def parse_timestamp(value: "datetime | date | str | None") -> datetime | None:
    """
    Parse a backend or user-supplied timestamp into a naive local datetime.

    A bare date becomes local midnight. Aware timestamps are converted to
    local time and stripped of their tzinfo.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        # Python < 3.11 doesn't accept a trailing Z
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError("due_date", f"Invalid date '{value}' (expected YYYY-MM-DD)")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 with the local UTC offset, so the backend stores the right instant."""
    return dt.astimezone().isoformat()


def clean_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("title", "Title is required")
    return cleaned


def new_task(
    title: str,
    description: str = "",
    category: "Category | str" = Category.OTHER,
    priority: "Priority | str" = Priority.MEDIUM,
    due_date: "datetime | date | str | None" = None,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> Task:
    """
    Build a new, validated task with a fresh id and creation time.

    Raises ValidationError for a blank title or an unknown category/priority.
    """
    id_factory = id_factory or (lambda: uuid.uuid4().hex)
    return Task(
        id=id_factory(),
        title=clean_title(title),
        description=(description or "").strip(),
        category=parse_category(category),
        priority=parse_priority(priority),
        due_date=parse_timestamp(due_date),
        completed=False,
        created_at=now or _now(),
    )


_IMMUTABLE_FIELDS = {"id", "created_at"}
_TASK_FIELDS = {f.name for f in fields(Task)}


def clean_changes(changes: dict) -> dict:
    """
    Validate a partial update.

    id and created_at never change; every other field is validated the same
    way new_task validates it.
    """
    for name in changes:
        if name in _IMMUTABLE_FIELDS:
            raise ValidationError(name, f"'{name}' cannot be changed")
        if name not in _TASK_FIELDS:
            raise ValidationError(name, f"Unknown task field '{name}'")

    cleaned = dict(changes)
    if "title" in cleaned:
        cleaned["title"] = clean_title(cleaned["title"])
    if "description" in cleaned:
        cleaned["description"] = (cleaned["description"] or "").strip()
    if "category" in cleaned:
        cleaned["category"] = parse_category(cleaned["category"])
    if "priority" in cleaned:
        cleaned["priority"] = parse_priority(cleaned["priority"])
    if "due_date" in cleaned:
        cleaned["due_date"] = parse_timestamp(cleaned["due_date"])
    if "completed" in cleaned:
        cleaned["completed"] = bool(cleaned["completed"])
    return cleaned


def apply_update(task: Task, **changes) -> Task:
    """Return a copy of task with a validated partial update applied."""
    return replace(task, **clean_changes(changes))


def changes_to_api(changes: dict) -> dict:
    """Validate a partial update and serialize it to backend columns."""
    row = {}
    for name, value in clean_changes(changes).items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = format_timestamp(value)
        row[name] = value
    return row


def toggle_completed(task: Task) -> Task:
    """Flip the completed flag, leaving everything else alone."""
    return replace(task, completed=not task.completed)


# ============== Derivations ==============


def classify_due(
    task: Task,
    now: datetime | None = None,
    window: timedelta = DUE_SOON_WINDOW,
) -> DueStatus:
    """
    Urgency of a task relative to now.

    Completed tasks and tasks without a due date are always normal. A due
    date exactly at now counts as due-soon, not overdue.
    Pure function - no I/O.
    """
    if task.completed or task.due_date is None:
        return DueStatus.NORMAL
    now = now or _now()
    if task.due_date < now:
        return DueStatus.OVERDUE
    if task.due_date - now < window:
        return DueStatus.DUE_SOON
    return DueStatus.NORMAL


def filter_tasks(
    tasks: list[Task],
    query: str = "",
    category: "Category | All" = ALL,
    priority: "Priority | All" = ALL,
) -> list[Task]:
    """
    Tasks matching the search text AND the category AND the priority.

    Pure function - no I/O. Input order is preserved.
    """
    return [
        t
        for t in tasks
        if t.matches(query)
        and (category is ALL or t.category == category)
        and (priority is ALL or t.priority == priority)
    ]


def sort_tasks(tasks: list[Task], mode: SortMode = SortMode.DUE_DATE) -> list[Task]:
    """
    Stable sort by due date (undated last), priority (high first) or
    creation time (newest first).

    Pure function - no I/O.
    """
    match mode:
        case SortMode.DUE_DATE:
            # (has no date, due date); undated tasks compare equal among themselves
            return sorted(
                tasks,
                key=lambda t: (t.due_date is None, t.due_date or datetime.min),
            )
        case SortMode.PRIORITY:
            return sorted(tasks, key=lambda t: -t.priority.rank)
        case SortMode.CREATED:
            return sorted(tasks, key=lambda t: t.created_at, reverse=True)
    raise ValidationError("sort", f"Invalid sort mode '{mode}'")

