"""Pure notes domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable

from .tasks import clean_title, format_timestamp, parse_timestamp


@dataclass
class Note:
    """A free-form note."""

    id: str
    title: str
    content: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def matches(self, query: str) -> bool:
        needle = query.strip().lower()
        if not needle:
            return True
        return needle in self.title.lower() or needle in self.content.lower()

    @classmethod
    def from_api(cls, data: dict) -> "Note":
        """Create Note from a backend row."""
        created = parse_timestamp(data.get("created_at")) or datetime.now()
        return cls(
            id=str(data["id"]),
            title=data["title"],
            content=data.get("content") or "",
            created_at=created,
            updated_at=parse_timestamp(data.get("updated_at")) or created,
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }


def new_note(
    title: str,
    content: str = "",
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> Note:
    """Build a new note. Raises ValidationError for a blank title."""
    now = now or datetime.now()
    id_factory = id_factory or (lambda: uuid.uuid4().hex)
    return Note(
        id=id_factory(),
        title=clean_title(title),
        content=content or "",
        created_at=now,
        updated_at=now,
    )


def edit_note(
    note: Note,
    title: str | None = None,
    content: str | None = None,
    now: datetime | None = None,
) -> Note:
    """Return an edited copy of note with updated_at bumped."""
    return replace(
        note,
        title=clean_title(title) if title is not None else note.title,
        content=content if content is not None else note.content,
        updated_at=now or datetime.now(),
    )


def sort_notes(notes: list[Note]) -> list[Note]:
    """Most recently updated first."""
    return sorted(notes, key=lambda n: n.updated_at, reverse=True)


def search_notes(notes: list[Note], query: str) -> list[Note]:
    """Filter notes by case-insensitive match on title or content."""
    return [n for n in notes if n.matches(query)]
