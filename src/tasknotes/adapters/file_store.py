"""File-based task and note storage adapters."""

import json
import logging
from pathlib import Path

from tasknotes.core.notes import Note, sort_notes
from tasknotes.core.tasks import Task, apply_update
from tasknotes.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)


class _JsonCollection:
    """A list of JSON rows kept in one file, in insertion order."""

    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt store {self.path}: {e}")
        if not isinstance(data, list):
            raise StoreError(f"Corrupt store {self.path}: expected a list")
        return data

    def write(self, rows: list[dict]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(rows, indent=2))
        tmp.replace(self.path)


class FileTaskStore:
    """
    File-based task storage.

    Implements TaskRepository protocol. All tasks live in one JSON file.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self._rows = _JsonCollection(self.data_dir / "tasks.json")

    def list_tasks(self) -> list[Task]:
        return [Task.from_api(row) for row in self._rows.read()]

    def create_task(self, task: Task) -> Task:
        rows = self._rows.read()
        if any(row["id"] == task.id for row in rows):
            raise StoreError(f"Task {task.id} already exists")
        rows.append(task.to_api())
        self._rows.write(rows)
        logger.debug(f"Created task {task.id}")
        return task

    def update_task(self, task_id: str, **changes) -> Task:
        rows = self._rows.read()
        for i, row in enumerate(rows):
            if row["id"] == task_id:
                updated = apply_update(Task.from_api(row), **changes)
                rows[i] = updated.to_api()
                self._rows.write(rows)
                logger.debug(f"Updated task {task_id}: {sorted(changes)}")
                return updated
        raise NotFoundError(f"No task with id {task_id}")

    def delete_task(self, task_id: str) -> None:
        rows = self._rows.read()
        remaining = [row for row in rows if row["id"] != task_id]
        if len(remaining) == len(rows):
            raise NotFoundError(f"No task with id {task_id}")
        self._rows.write(remaining)
        logger.debug(f"Deleted task {task_id}")


class FileNoteStore:
    """
    File-based note storage.

    Implements NoteRepository protocol.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self._rows = _JsonCollection(self.data_dir / "notes.json")

    def list_notes(self) -> list[Note]:
        return sort_notes([Note.from_api(row) for row in self._rows.read()])

    def create_note(self, note: Note) -> Note:
        rows = self._rows.read()
        rows.append(note.to_api())
        self._rows.write(rows)
        logger.debug(f"Created note {note.id}")
        return note

    def update_note(self, note: Note) -> Note:
        rows = self._rows.read()
        for i, row in enumerate(rows):
            if row["id"] == note.id:
                rows[i] = note.to_api()
                self._rows.write(rows)
                logger.debug(f"Updated note {note.id}")
                return note
        raise NotFoundError(f"No note with id {note.id}")

    def delete_note(self, note_id: str) -> None:
        rows = self._rows.read()
        remaining = [row for row in rows if row["id"] != note_id]
        if len(remaining) == len(rows):
            raise NotFoundError(f"No note with id {note_id}")
        self._rows.write(remaining)
        logger.debug(f"Deleted note {note_id}")
