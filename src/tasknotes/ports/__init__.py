"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .note_repo import NoteRepository
from .session import SessionProvider

__all__ = [
    "TaskRepository",
    "NoteRepository",
    "SessionProvider",
]
