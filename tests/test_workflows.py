"""Tests for the shared workflow layer."""

from datetime import date, datetime, timedelta
from unittest.mock import patch

import pytest

from tasknotes.adapters.file_store import FileNoteStore, FileTaskStore
from tasknotes.config import Config
from tasknotes.core.tasks import ALL, Category, Priority, SortMode, new_task, toggle_completed
from tasknotes.errors import NotFoundError, ValidationError
from tasknotes.workflows import (
    add_note,
    add_task,
    build_filters,
    due_soon_window,
    edit_note,
    edit_task,
    get_note_store,
    get_task_store,
    list_notes,
    load_board,
    load_day,
    load_month,
    remove_note,
    remove_task,
    resolve_task_id,
    toggle_task,
)


@pytest.fixture
def now():
    return datetime(2025, 5, 22, 10, 0)


@pytest.fixture
def store(tmp_path):
    return FileTaskStore(tmp_path)


@pytest.fixture
def note_store(tmp_path):
    return FileNoteStore(tmp_path)


class TestGetStore:
    def test_local_backend(self, tmp_path):
        config = Config(data_dir=str(tmp_path))
        assert isinstance(get_task_store(config), FileTaskStore)
        assert get_task_store(config).data_dir == tmp_path
        assert isinstance(get_note_store(config), FileNoteStore)

    @patch("tasknotes.workflows.SupabaseAdapter")
    def test_supabase_backend(self, mock_cls):
        config = Config(backend="supabase", supabase_url="https://x", supabase_anon_key="k")
        assert get_task_store(config) is mock_cls.return_value
        assert get_note_store(config) is mock_cls.return_value
        mock_cls.assert_called_with(config)

    def test_due_soon_window(self):
        assert due_soon_window(Config(due_soon_hours=6)) == timedelta(hours=6)


class TestBuildFilters:
    def test_defaults(self):
        filters = build_filters()
        assert filters.category is ALL
        assert filters.priority is ALL
        assert filters.sort is SortMode.DUE_DATE

    def test_parses(self):
        filters = build_filters("milk", "shopping", "high", "created")
        assert filters.query == "milk"
        assert filters.category is Category.SHOPPING
        assert filters.priority is Priority.HIGH
        assert filters.sort is SortMode.CREATED

    def test_rejects_unknown(self):
        with pytest.raises(ValidationError):
            build_filters(category="errands")


class TestTaskWorkflows:
    def test_add_and_load_board(self, store, now):
        add_task(store, "Buy milk", category="shopping", due_date="2025-05-23", now=now)
        add_task(store, "Gym", category="health", priority="low", now=now)
        board = load_board(store, build_filters(category="shopping"))
        assert [t.title for t in board.pending] == ["Buy milk"]
        assert board.stats.total == 2

    def test_add_rejects_blank_title(self, store):
        with pytest.raises(ValidationError):
            add_task(store, "   ")
        assert store.list_tasks() == []

    def test_toggle_by_prefix(self, store, now):
        task = add_task(store, "Gym", now=now)
        toggled = toggle_task(store, task.id[:6])
        assert toggled.completed is True
        assert toggle_task(store, task.id).completed is False

    def test_toggle_uses_core_helper(self, store, now):
        task = add_task(store, "Gym", now=now)
        with patch("tasknotes.workflows.toggle_completed", wraps=toggle_completed) as spy:
            toggle_task(store, task.id)
        spy.assert_called_once_with(task)

    def test_edit(self, store, now):
        task = add_task(store, "Gym", now=now)
        edited = edit_task(store, task.id, title="Gym session", due_date=date(2025, 5, 30))
        assert edited.title == "Gym session"
        assert edited.due_date == datetime(2025, 5, 30)
        assert store.list_tasks() == [edited]

    def test_edit_validates_before_lookup(self, store):
        with pytest.raises(ValidationError):
            edit_task(store, "missing", created_at=datetime.now())

    def test_remove(self, store, now):
        task = add_task(store, "Gym", now=now)
        assert remove_task(store, task.id) == task
        assert store.list_tasks() == []

    def test_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            toggle_task(store, "zzz")

    def test_ambiguous_prefix(self, store, now):
        ids = iter(["abc1", "abc2"])
        for title in ("One", "Two"):
            store.create_task(new_task(title, now=now, id_factory=lambda: next(ids)))
        with pytest.raises(NotFoundError, match="matches 2 tasks"):
            resolve_task_id(store, "abc")
        assert resolve_task_id(store, "abc2").title == "Two"

    def test_load_month_and_day(self, store, now):
        add_task(store, "Due 23rd", due_date="2025-05-23", now=now)
        add_task(store, "Undated", now=now)
        month = load_month(store, 2025, 5, today=now.date())
        assert [t.title for t in month.day(date(2025, 5, 23)).tasks] == ["Due 23rd"]
        assert [t.title for t in load_day(store, date(2025, 5, 23))] == ["Due 23rd"]
        assert load_day(store, date(2025, 5, 24)) == []


class TestNoteWorkflows:
    def test_add_list_edit_remove(self, note_store, now):
        first = add_note(note_store, "Groceries", "milk", now=now)
        second = add_note(note_store, "Ideas", "garden", now=now + timedelta(minutes=1))
        assert [n.title for n in list_notes(note_store)] == ["Ideas", "Groceries"]

        edited = edit_note(note_store, first.id[:6], content="milk, eggs", now=now + timedelta(minutes=2))
        assert edited.content == "milk, eggs"
        assert [n.title for n in list_notes(note_store)] == ["Groceries", "Ideas"]
        assert [n.title for n in list_notes(note_store, "garden")] == ["Ideas"]

        remove_note(note_store, second.id)
        assert [n.id for n in list_notes(note_store)] == [first.id]

    def test_add_requires_title(self, note_store):
        with pytest.raises(ValidationError):
            add_note(note_store, "")

    def test_edit_unknown(self, note_store):
        with pytest.raises(NotFoundError):
            edit_note(note_store, "nope", title="x")
