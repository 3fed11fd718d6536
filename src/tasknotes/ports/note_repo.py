"""Note repository interface."""

from typing import Protocol

from tasknotes.core.notes import Note


class NoteRepository(Protocol):
    """Interface for reading and writing notes."""

    def list_notes(self) -> list[Note]:
        """Fetch all notes, most recently updated first."""
        ...

    def create_note(self, note: Note) -> Note:
        ...

    def update_note(self, note: Note) -> Note:
        """Overwrite title, content and updated_at of an existing note."""
        ...

    def delete_note(self, note_id: str) -> None:
        ...
