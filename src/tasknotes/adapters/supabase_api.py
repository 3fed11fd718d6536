"""Supabase adapter - HTTP client for auth, tasks and notes."""

import logging
import time

import requests

from tasknotes.config import Config, Tokens, load_config
from tasknotes.core.notes import Note
from tasknotes.core.tasks import Task, changes_to_api
from tasknotes.errors import AuthenticationError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
REFRESH_MARGIN = 300


class SupabaseAdapter:
    """
    Supabase adapter.

    Implements TaskRepository, NoteRepository and SessionProvider protocols.
    Handles the password sign-in, token refresh, and PostgREST calls. No
    business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, tokens: Tokens | None = None):
        self.config = config or load_config()
        self.tokens = tokens or Tokens.load()
        self._session = requests.Session()

        if not self.config.supabase_url or not self.config.supabase_anon_key:
            raise AuthenticationError(
                "Missing Supabase settings. Add SUPABASE_URL and SUPABASE_ANON_KEY to config/tasknotes.conf"
            )

    @property
    def _auth_url(self) -> str:
        return f"{self.config.supabase_url}/auth/v1"

    @property
    def _rest_url(self) -> str:
        return f"{self.config.supabase_url}/rest/v1"

    # ---------- session ----------

    def current_user(self) -> str | None:
        return self.tokens.user_id or None

    def sign_in(self, email: str, password: str) -> str:
        """Sign in with email and password. Returns the user id."""
        resp = self._token_request("password", {"email": email, "password": password})
        if resp.status_code != 200:
            raise AuthenticationError(f"Sign in failed: {_error_message(resp)}")

        self._store_session(resp.json())
        logger.info(f"Signed in as {email}")
        return self.tokens.user_id

    def sign_out(self) -> None:
        """Revoke the session server-side (best effort) and forget it locally."""
        if self.tokens.access_token:
            try:
                resp = self._session.post(
                    f"{self._auth_url}/logout",
                    headers=self._headers(),
                    timeout=REQUEST_TIMEOUT,
                )
            except requests.RequestException as e:
                logger.warning(f"Sign out request failed: {e}")
            else:
                if not resp.ok:
                    logger.warning(f"Sign out request failed: {resp.status_code}")
        self.tokens.clear()

    def _store_session(self, data: dict) -> None:
        user = data.get("user") or {}
        self.tokens.access_token = data.get("access_token", "")
        self.tokens.refresh_token = data.get("refresh_token", self.tokens.refresh_token)
        self.tokens.expires_at = int(time.time()) + data.get("expires_in", 3600)
        self.tokens.user_id = user.get("id", self.tokens.user_id)
        if not self.tokens.access_token or not self.tokens.user_id:
            raise AuthenticationError("Missing token or user id in auth response")
        self.tokens.save()

    def _ensure_valid_token(self) -> None:
        """Refresh token if expired or expiring soon."""
        if not self.tokens.access_token:
            raise AuthenticationError("Not signed in. Run 'tasknotes login' first.")

        if self.tokens.expires_at and time.time() >= self.tokens.expires_at - REFRESH_MARGIN:
            self._refresh_token()

    def _refresh_token(self) -> None:
        if not self.tokens.refresh_token:
            raise AuthenticationError("No refresh token. Run 'tasknotes login' first.")

        logger.debug("Refreshing Supabase access token")
        resp = self._token_request("refresh_token", {"refresh_token": self.tokens.refresh_token})
        if resp.status_code != 200:
            raise AuthenticationError(f"Token refresh failed: {_error_message(resp)}")
        self._store_session(resp.json())

    def _token_request(self, grant_type: str, body: dict) -> requests.Response:
        try:
            return self._session.post(
                f"{self._auth_url}/token",
                params={"grant_type": grant_type},
                json=body,
                headers={"apikey": self.config.supabase_anon_key},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise StoreError(f"Could not reach Supabase: {e}") from e

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.config.supabase_anon_key,
            "Authorization": f"Bearer {self.tokens.access_token}",
        }

    def _table_request(
        self,
        method: str,
        table: str,
        params: dict | None = None,
        payload: dict | None = None,
        returning: bool = False,
    ) -> list[dict]:
        """Make an authenticated PostgREST request."""
        self._ensure_valid_token()
        headers = self._headers()
        if returning:
            headers["Prefer"] = "return=representation"

        try:
            resp = self._session.request(
                method,
                f"{self._rest_url}/{table}",
                params=params,
                json=payload,
                headers=headers,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {table} failed: {e}")
            raise StoreError(f"Could not reach Supabase: {e}") from e
        if resp.status_code == 401:
            raise AuthenticationError(f"Session rejected: {_error_message(resp)}")
        if not resp.ok:
            logger.error(f"{method} {table} failed: {resp.status_code} {resp.text}")
            raise StoreError(f"{method} {table} failed: {_error_message(resp)}")
        if not resp.content:
            return []
        return resp.json()

    # ---------- tasks ----------

    def list_tasks(self) -> list[Task]:
        rows = self._table_request("GET", "tasks", params={"select": "*", "order": "created_at.asc"})
        return [Task.from_api(row) for row in rows]

    def create_task(self, task: Task) -> Task:
        row = {**task.to_api(), "user_id": self.tokens.user_id}
        rows = self._table_request("POST", "tasks", payload=row, returning=True)
        return Task.from_api(rows[0]) if rows else task

    def update_task(self, task_id: str, **changes) -> Task:
        rows = self._table_request(
            "PATCH",
            "tasks",
            params={"id": f"eq.{task_id}"},
            payload=changes_to_api(changes),
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"No task with id {task_id}")
        return Task.from_api(rows[0])

    def delete_task(self, task_id: str) -> None:
        rows = self._table_request("DELETE", "tasks", params={"id": f"eq.{task_id}"}, returning=True)
        if not rows:
            raise NotFoundError(f"No task with id {task_id}")

    # ---------- notes ----------

    def list_notes(self) -> list[Note]:
        rows = self._table_request("GET", "notes", params={"select": "*", "order": "updated_at.desc"})
        return [Note.from_api(row) for row in rows]

    def create_note(self, note: Note) -> Note:
        row = {**note.to_api(), "user_id": self.tokens.user_id}
        rows = self._table_request("POST", "notes", payload=row, returning=True)
        return Note.from_api(rows[0]) if rows else note

    def update_note(self, note: Note) -> Note:
        row = note.to_api()
        payload = {k: row[k] for k in ("title", "content", "updated_at")}
        rows = self._table_request(
            "PATCH",
            "notes",
            params={"id": f"eq.{note.id}"},
            payload=payload,
            returning=True,
        )
        if not rows:
            raise NotFoundError(f"No note with id {note.id}")
        return Note.from_api(rows[0])

    def delete_note(self, note_id: str) -> None:
        rows = self._table_request("DELETE", "notes", params={"id": f"eq.{note_id}"}, returning=True)
        if not rows:
            raise NotFoundError(f"No note with id {note_id}")


def _error_message(resp: requests.Response) -> str:
    """Best human-readable message from a Supabase error body."""
    try:
        data = resp.json()
    except ValueError:
        return f"{resp.status_code} {resp.text}"
    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            if data.get(key):
                return str(data[key])
    return f"{resp.status_code} {resp.text}"
