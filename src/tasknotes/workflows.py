"""Shared workflow layer between the CLI and the stores.

Each function: loads the current collection from a store, runs the pure
core over it, and (for mutations) writes the result back through the store.
"""

import logging
from datetime import date, datetime, timedelta

from .adapters.file_store import FileNoteStore, FileTaskStore
from .adapters.supabase_api import SupabaseAdapter
from .config import Config
from .core import notes as notes_core
from .core.board import TaskBoard, TaskFilters, assemble_board
from .core.calendar import CalendarMonth, assemble_month, tasks_for_date
from .core.notes import Note, new_note, search_notes
from .core.tasks import (
    Task,
    clean_changes,
    new_task,
    parse_category_filter,
    parse_priority_filter,
    parse_sort_mode,
    toggle_completed,
)
from .errors import NotFoundError
from .ports import NoteRepository, TaskRepository

logger = logging.getLogger(__name__)


def get_task_store(config: Config) -> TaskRepository:
    """Resolve the task backend from config."""
    if config.backend == "supabase":
        return SupabaseAdapter(config)
    return FileTaskStore(config.data_path)


def get_note_store(config: Config) -> NoteRepository:
    """Resolve the note backend from config."""
    if config.backend == "supabase":
        return SupabaseAdapter(config)
    return FileNoteStore(config.data_path)


def due_soon_window(config: Config) -> timedelta:
    return timedelta(hours=config.due_soon_hours)


def build_filters(
    query: str = "",
    category: str = "all",
    priority: str = "all",
    sort: str = "dueDate",
) -> TaskFilters:
    """Parse raw selector strings into TaskFilters. Raises ValidationError."""
    return TaskFilters(
        query=query or "",
        category=parse_category_filter(category),
        priority=parse_priority_filter(priority),
        sort=parse_sort_mode(sort),
    )


def _resolve(items: list, prefix: str, kind: str):
    """Find the single item whose id starts with prefix."""
    prefix = prefix.strip()
    exact = [i for i in items if i.id == prefix]
    if exact:
        return exact[0]
    matches = [i for i in items if prefix and i.id.startswith(prefix)]
    if not matches:
        raise NotFoundError(f"No {kind} matching '{prefix}'")
    if len(matches) > 1:
        raise NotFoundError(f"'{prefix}' matches {len(matches)} {kind}s, use a longer id")
    return matches[0]


def resolve_task_id(store: TaskRepository, prefix: str) -> Task:
    return _resolve(store.list_tasks(), prefix, "task")


# ============== Tasks ==============


def load_board(store: TaskRepository, filters: TaskFilters | None = None) -> TaskBoard:
    """Fetch all tasks and assemble the list view."""
    tasks = store.list_tasks()
    logger.debug(f"Loaded {len(tasks)} tasks")
    return assemble_board(tasks, filters)


def add_task(
    store: TaskRepository,
    title: str,
    description: str = "",
    category: str = "other",
    priority: str = "medium",
    due_date: date | str | None = None,
    now: datetime | None = None,
) -> Task:
    """Validate and store a new task."""
    task = new_task(
        title,
        description=description,
        category=category,
        priority=priority,
        due_date=due_date,
        now=now,
    )
    created = store.create_task(task)
    logger.info(f"Added task {created.id}: {created.title}")
    return created


def edit_task(store: TaskRepository, task_id: str, **changes) -> Task:
    """Apply a partial update to the task matching task_id (or an id prefix)."""
    # validate before touching the store
    cleaned = clean_changes(changes)
    task = resolve_task_id(store, task_id)
    updated = store.update_task(task.id, **cleaned)
    logger.info(f"Edited task {task.id}: {sorted(cleaned)}")
    return updated


def toggle_task(store: TaskRepository, task_id: str) -> Task:
    """Flip the completed flag of a task."""
    task = resolve_task_id(store, task_id)
    toggled = toggle_completed(task)
    updated = store.update_task(task.id, completed=toggled.completed)
    logger.info(f"Task {task.id} completed={updated.completed}")
    return updated


def remove_task(store: TaskRepository, task_id: str) -> Task:
    task = resolve_task_id(store, task_id)
    store.delete_task(task.id)
    logger.info(f"Removed task {task.id}")
    return task


def load_month(
    store: TaskRepository,
    year: int,
    month: int,
    today: date | None = None,
) -> CalendarMonth:
    return assemble_month(store.list_tasks(), year, month, today)


def load_day(store: TaskRepository, day: date) -> list[Task]:
    return tasks_for_date(store.list_tasks(), day)


# ============== Notes ==============


def list_notes(store: NoteRepository, query: str = "") -> list[Note]:
    return search_notes(notes_core.sort_notes(store.list_notes()), query)


def add_note(store: NoteRepository, title: str, content: str = "", now: datetime | None = None) -> Note:
    note = store.create_note(new_note(title, content, now=now))
    logger.info(f"Added note {note.id}: {note.title}")
    return note


def edit_note(
    store: NoteRepository,
    note_id: str,
    title: str | None = None,
    content: str | None = None,
    now: datetime | None = None,
) -> Note:
    note = _resolve(store.list_notes(), note_id, "note")
    updated = store.update_note(notes_core.edit_note(note, title=title, content=content, now=now))
    logger.info(f"Edited note {note.id}")
    return updated


def remove_note(store: NoteRepository, note_id: str) -> Note:
    note = _resolve(store.list_notes(), note_id, "note")
    store.delete_note(note.id)
    logger.info(f"Removed note {note.id}")
    return note
