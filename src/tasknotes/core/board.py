"""Pure task board assembly logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .tasks import (
    ALL,
    DUE_SOON_WINDOW,
    All,
    Category,
    DueStatus,
    Priority,
    SortMode,
    Task,
    classify_due,
    filter_tasks,
    sort_tasks,
)

PRIORITY_MARKERS = {
    Priority.LOW: "●",
    Priority.MEDIUM: "●●",
    Priority.HIGH: "●●●",
}


@dataclass
class TaskFilters:
    """User-selected search, filter and sort options."""

    query: str = ""
    category: Category | All = ALL
    priority: Priority | All = ALL
    sort: SortMode = SortMode.DUE_DATE

    @property
    def is_active(self) -> bool:
        """True when any filter narrows the list (sort order doesn't count)."""
        return bool(self.query.strip()) or self.category is not ALL or self.priority is not ALL


@dataclass
class TaskStats:
    """Counts over the whole, unfiltered collection."""

    total: int = 0
    completed: int = 0
    pending: int = 0


@dataclass
class TaskBoard:
    """Assembled list view ready for formatting."""

    pending: list[Task]
    completed: list[Task]
    stats: TaskStats
    filters: TaskFilters = field(default_factory=TaskFilters)

    @property
    def is_empty(self) -> bool:
        return not self.pending and not self.completed

    def empty_message(self) -> str:
        if self.filters.is_active:
            return "Try adjusting your search or filters"
        return "Create your first task to get started"


def compute_stats(tasks: list[Task]) -> TaskStats:
    """Pure function - no I/O."""
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskStats(total=total, completed=completed, pending=total - completed)


def partition_tasks(tasks: list[Task]) -> tuple[list[Task], list[Task]]:
    """
    Split tasks into pending and completed, keeping their order.

    Returns: (pending, completed)
    Pure function - no I/O.
    """
    pending = [t for t in tasks if not t.completed]
    completed = [t for t in tasks if t.completed]
    return pending, completed


def assemble_board(tasks: list[Task], filters: TaskFilters | None = None) -> TaskBoard:
    """
    Assemble the list view from the raw collection and the user's selection.

    Pure function - no I/O. Filters, sorts, then partitions; stats always
    cover the full collection regardless of filters.
    """
    filters = filters or TaskFilters()

    visible = filter_tasks(tasks, filters.query, filters.category, filters.priority)
    visible = sort_tasks(visible, filters.sort)
    pending, completed = partition_tasks(visible)

    return TaskBoard(
        pending=pending,
        completed=completed,
        stats=compute_stats(tasks),
        filters=filters,
    )


def format_due(task: Task, now: datetime, window: timedelta = DUE_SOON_WINDOW) -> str:
    """Due date text with an Overdue/Due soon prefix, or empty when undated."""
    if task.due_date is None:
        return ""
    prefix = {
        DueStatus.OVERDUE: "Overdue: ",
        DueStatus.DUE_SOON: "Due soon: ",
        DueStatus.NORMAL: "",
    }[classify_due(task, now, window)]
    return f"{prefix}{task.due_date.strftime('%b %d, %Y')}"


def format_task_line(task: Task, now: datetime, window: timedelta = DUE_SOON_WINDOW) -> str:
    """
    Format a single task for display.

    Pure function - no I/O.
    """
    check = "x" if task.completed else " "
    marker = PRIORITY_MARKERS[task.priority]
    due = format_due(task, now, window)
    due_str = f" ({due})" if due else ""
    return f"[{check}] {task.id[:8]} {marker:3} {task.title} #{task.category.value}{due_str}"


def format_board_sections(
    board: TaskBoard,
    now: datetime,
    window: timedelta = DUE_SOON_WINDOW,
) -> dict[str, str]:
    """
    Format board data into text sections.

    Pure function - no I/O.
    Returns dict with keys: stats, pending, completed
    """
    s = board.stats
    stats = f"Total: {s.total}  Pending: {s.pending}  Completed: {s.completed}"

    pending = ""
    if board.pending:
        lines = "\n".join(format_task_line(t, now, window) for t in board.pending)
        pending = f"Pending Tasks ({len(board.pending)})\n{lines}"

    completed = ""
    if board.completed:
        lines = "\n".join(format_task_line(t, now, window) for t in board.completed)
        completed = f"Completed Tasks ({len(board.completed)})\n{lines}"

    return {"stats": stats, "pending": pending, "completed": completed}
