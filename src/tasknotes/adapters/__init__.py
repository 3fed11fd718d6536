"""Adapters - I/O implementations of ports."""

from .supabase_api import SupabaseAdapter
from .file_store import FileTaskStore, FileNoteStore

__all__ = [
    "SupabaseAdapter",
    "FileTaskStore",
    "FileNoteStore",
]
