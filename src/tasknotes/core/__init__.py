"""Functional core - pure business logic with no I/O."""

from .tasks import (
    ALL,
    All,
    Category,
    DueStatus,
    Priority,
    SortMode,
    Task,
    apply_update,
    classify_due,
    filter_tasks,
    new_task,
    sort_tasks,
    toggle_completed,
)
from .board import TaskBoard, TaskFilters, TaskStats, assemble_board, partition_tasks, compute_stats
from .calendar import CalendarDay, CalendarMonth, assemble_month, tasks_for_date
from .notes import Note, new_note, edit_note, sort_notes

__all__ = [
    # Tasks
    "ALL",
    "All",
    "Category",
    "DueStatus",
    "Priority",
    "SortMode",
    "Task",
    "apply_update",
    "classify_due",
    "filter_tasks",
    "new_task",
    "sort_tasks",
    "toggle_completed",
    # Board
    "TaskBoard",
    "TaskFilters",
    "TaskStats",
    "assemble_board",
    "partition_tasks",
    "compute_stats",
    # Calendar
    "CalendarDay",
    "CalendarMonth",
    "assemble_month",
    "tasks_for_date",
    # Notes
    "Note",
    "new_note",
    "edit_note",
    "sort_notes",
]
