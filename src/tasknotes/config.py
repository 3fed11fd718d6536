"""Configuration management for tasknotes."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TASKNOTES_HOME = Path(os.environ.get("TASKNOTES_HOME", Path.home() / "tasknotes"))
CONFIG_FILE = TASKNOTES_HOME / "config" / "tasknotes.conf"
TOKEN_FILE = TASKNOTES_HOME / "config" / ".tokens.json"
DATA_DIR = TASKNOTES_HOME / "data"

BACKENDS = ("local", "supabase")
SORT_MODES = ("dueDate", "priority", "created")


@dataclass
class Config:
    """tasknotes configuration."""

    backend: str = "local"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    email: str = ""
    default_sort: str = "dueDate"
    due_soon_hours: int = 24
    data_dir: str = ""

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


@dataclass
class Tokens:
    """Supabase session tokens."""

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0
    user_id: str = ""

    def save(self) -> None:
        """Save tokens to file."""
        TOKEN_FILE.parent.mkdir(parents=True, exist_ok=True)
        TOKEN_FILE.write_text(
            json.dumps(
                {
                    "access_token": self.access_token,
                    "refresh_token": self.refresh_token,
                    "expires_at": self.expires_at,
                    "user_id": self.user_id,
                }
            )
        )
        TOKEN_FILE.chmod(0o600)

    def clear(self) -> None:
        """Forget the session, in memory and on disk."""
        self.access_token = ""
        self.refresh_token = ""
        self.expires_at = 0
        self.user_id = ""
        if TOKEN_FILE.exists():
            TOKEN_FILE.unlink()

    @classmethod
    def load(cls) -> "Tokens":
        """Load tokens from file."""
        if not TOKEN_FILE.exists():
            return cls()
        try:
            data = json.loads(TOKEN_FILE.read_text())
            return cls(
                access_token=data.get("access_token", ""),
                refresh_token=data.get("refresh_token", ""),
                expires_at=data.get("expires_at", 0),
                user_id=data.get("user_id", ""),
            )
        except (json.JSONDecodeError, KeyError):
            return cls()


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from tasknotes.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "backend":
                if value.lower() in BACKENDS:
                    config.backend = value.lower()
                else:
                    logger.warning(f"Unknown BACKEND '{value}', using {config.backend}")
            case "supabase_url":
                config.supabase_url = value.rstrip("/")
            case "supabase_anon_key":
                config.supabase_anon_key = value
            case "email":
                config.email = value
            case "default_sort":
                if value in SORT_MODES:
                    config.default_sort = value
                else:
                    logger.warning(f"Unknown DEFAULT_SORT '{value}', using {config.default_sort}")
            case "due_soon_hours":
                try:
                    hours = int(value)
                except ValueError:
                    hours = 0
                if hours > 0:
                    config.due_soon_hours = hours
                else:
                    logger.warning(f"Invalid DUE_SOON_HOURS '{value}', using {config.due_soon_hours}")
            case "data_dir":
                config.data_dir = value
            case _:
                logger.debug(f"Ignoring unknown config key '{key}'")

    return config
