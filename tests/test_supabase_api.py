"""Tests for the Supabase adapter."""

import time
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from tasknotes import config as config_module
from tasknotes.adapters.supabase_api import SupabaseAdapter
from tasknotes.config import Config, Tokens
from tasknotes.core.notes import new_note
from tasknotes.core.tasks import Category, Priority, new_task
from tasknotes.errors import AuthenticationError, NotFoundError, StoreError

URL = "https://abc.supabase.co"


def response(status: int = 200, body=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = body
    resp.content = b"" if body is None else b"x"
    resp.text = "" if body is None else str(body)
    return resp


def task_row(id: str = "t1", **overrides) -> dict:
    row = {
        "id": id,
        "title": "Buy milk",
        "description": "",
        "category": "shopping",
        "priority": "medium",
        "due_date": "2025-05-23T00:00:00",
        "completed": False,
        "created_at": "2025-05-20T09:00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture(autouse=True)
def token_file(tmp_path, monkeypatch):
    path = tmp_path / ".tokens.json"
    monkeypatch.setattr(config_module, "TOKEN_FILE", path)
    return path


@pytest.fixture
def config():
    return Config(backend="supabase", supabase_url=URL, supabase_anon_key="anon")


@pytest.fixture
def tokens():
    return Tokens(access_token="tok", refresh_token="ref", expires_at=int(time.time()) + 3600, user_id="u1")


@pytest.fixture
def session():
    with patch("tasknotes.adapters.supabase_api.requests.Session") as mock_cls:
        instance = MagicMock()
        mock_cls.return_value = instance
        yield instance


class TestSession:
    def test_requires_settings(self, session):
        with pytest.raises(AuthenticationError, match="Missing Supabase settings"):
            SupabaseAdapter(Config(), Tokens())

    def test_sign_in_stores_tokens(self, session, config, token_file):
        session.post.return_value = response(
            200,
            {"access_token": "a1", "refresh_token": "r1", "expires_in": 3600, "user": {"id": "u42"}},
        )
        adapter = SupabaseAdapter(config, Tokens())
        assert adapter.sign_in("me@example.com", "pw") == "u42"

        args, kwargs = session.post.call_args
        assert args[0] == f"{URL}/auth/v1/token"
        assert kwargs["params"] == {"grant_type": "password"}
        assert kwargs["json"] == {"email": "me@example.com", "password": "pw"}
        assert kwargs["headers"] == {"apikey": "anon"}
        assert adapter.current_user() == "u42"
        assert Tokens.load().access_token == "a1"

    def test_sign_in_failure(self, session, config):
        session.post.return_value = response(400, {"error_description": "Invalid login credentials"})
        adapter = SupabaseAdapter(config, Tokens())
        with pytest.raises(AuthenticationError, match="Invalid login credentials"):
            adapter.sign_in("me@example.com", "wrong")
        assert adapter.current_user() is None

    def test_sign_out(self, session, config, tokens, token_file):
        tokens.save()
        session.post.return_value = response(204)
        adapter = SupabaseAdapter(config, tokens)
        adapter.sign_out()
        assert session.post.call_args[0][0] == f"{URL}/auth/v1/logout"
        assert adapter.current_user() is None
        assert not token_file.exists()

    def test_sign_out_offline_still_forgets_session(self, session, config, tokens, token_file):
        tokens.save()
        session.post.side_effect = requests.ConnectionError("offline")
        adapter = SupabaseAdapter(config, tokens)
        adapter.sign_out()
        assert adapter.current_user() is None
        assert not token_file.exists()

    def test_sign_in_unreachable(self, session, config):
        session.post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(StoreError, match="Could not reach Supabase"):
            SupabaseAdapter(config, Tokens()).sign_in("me@example.com", "pw")

    def test_not_signed_in(self, session, config):
        adapter = SupabaseAdapter(config, Tokens())
        with pytest.raises(AuthenticationError, match="Not signed in"):
            adapter.list_tasks()
        session.request.assert_not_called()

    def test_refreshes_expiring_token(self, session, config, tokens):
        tokens.expires_at = int(time.time()) + 60
        session.post.return_value = response(
            200,
            {"access_token": "fresh", "refresh_token": "ref2", "expires_in": 3600, "user": {"id": "u1"}},
        )
        session.request.return_value = response(200, [])
        adapter = SupabaseAdapter(config, tokens)
        adapter.list_tasks()

        assert session.post.call_args.kwargs["params"] == {"grant_type": "refresh_token"}
        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer fresh"

    def test_refresh_failure(self, session, config, tokens):
        tokens.expires_at = int(time.time()) - 10
        session.post.return_value = response(400, {"msg": "Invalid Refresh Token"})
        with pytest.raises(AuthenticationError, match="Invalid Refresh Token"):
            SupabaseAdapter(config, tokens).list_tasks()


class TestTasks:
    def test_list_tasks(self, session, config, tokens):
        session.request.return_value = response(200, [task_row("t1"), task_row("t2", priority="high")])
        tasks = SupabaseAdapter(config, tokens).list_tasks()

        assert [t.id for t in tasks] == ["t1", "t2"]
        assert tasks[0].category is Category.SHOPPING
        assert tasks[1].priority is Priority.HIGH
        args, kwargs = session.request.call_args
        assert args == ("GET", f"{URL}/rest/v1/tasks")
        assert kwargs["params"] == {"select": "*", "order": "created_at.asc"}
        assert kwargs["headers"]["apikey"] == "anon"
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_create_task_stamps_user(self, session, config, tokens):
        task = new_task("Buy milk", category="shopping", now=datetime(2025, 5, 20, 9, 0), id_factory=lambda: "t1")
        session.request.return_value = response(201, [task.to_api()])
        created = SupabaseAdapter(config, tokens).create_task(task)

        assert created == task
        kwargs = session.request.call_args.kwargs
        assert kwargs["json"]["user_id"] == "u1"
        assert kwargs["json"]["title"] == "Buy milk"
        assert kwargs["headers"]["Prefer"] == "return=representation"

    def test_update_task(self, session, config, tokens):
        session.request.return_value = response(200, [task_row("t1", completed=True)])
        updated = SupabaseAdapter(config, tokens).update_task("t1", completed=True)

        assert updated.completed is True
        args, kwargs = session.request.call_args
        assert args[0] == "PATCH"
        assert kwargs["params"] == {"id": "eq.t1"}
        assert kwargs["json"] == {"completed": True}

    def test_update_missing(self, session, config, tokens):
        session.request.return_value = response(200, [])
        with pytest.raises(NotFoundError):
            SupabaseAdapter(config, tokens).update_task("ghost", title="x")

    def test_delete_task(self, session, config, tokens):
        session.request.return_value = response(200, [task_row("t1")])
        SupabaseAdapter(config, tokens).delete_task("t1")
        args, kwargs = session.request.call_args
        assert args[0] == "DELETE"
        assert kwargs["params"] == {"id": "eq.t1"}

    def test_delete_missing(self, session, config, tokens):
        session.request.return_value = response(200, [])
        with pytest.raises(NotFoundError):
            SupabaseAdapter(config, tokens).delete_task("ghost")

    def test_server_error(self, session, config, tokens):
        session.request.return_value = response(500, {"message": "boom"})
        with pytest.raises(StoreError, match="boom"):
            SupabaseAdapter(config, tokens).list_tasks()

    def test_network_failure(self, session, config, tokens):
        session.request.side_effect = requests.Timeout("timed out")
        with pytest.raises(StoreError, match="Could not reach Supabase"):
            SupabaseAdapter(config, tokens).list_tasks()

    def test_rejected_session(self, session, config, tokens):
        session.request.return_value = response(401, {"message": "JWT expired"})
        with pytest.raises(AuthenticationError, match="JWT expired"):
            SupabaseAdapter(config, tokens).list_tasks()


class TestNotes:
    def test_list_notes(self, session, config, tokens):
        session.request.return_value = response(
            200,
            [{"id": "n1", "title": "Ideas", "content": "x", "created_at": "2025-05-20T09:00:00",
              "updated_at": "2025-05-21T09:00:00"}],
        )
        notes = SupabaseAdapter(config, tokens).list_notes()
        assert notes[0].title == "Ideas"
        assert session.request.call_args.kwargs["params"]["order"] == "updated_at.desc"

    def test_update_note_sends_editable_fields(self, session, config, tokens):
        note = new_note("Ideas", "v2", now=datetime(2025, 5, 21, 9, 0), id_factory=lambda: "n1")
        session.request.return_value = response(200, [note.to_api()])
        SupabaseAdapter(config, tokens).update_note(note)
        assert set(session.request.call_args.kwargs["json"]) == {"title", "content", "updated_at"}

    def test_delete_missing_note(self, session, config, tokens):
        session.request.return_value = response(200, [])
        with pytest.raises(NotFoundError):
            SupabaseAdapter(config, tokens).delete_note("ghost")
