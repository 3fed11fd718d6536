"""Auth session interface."""

from typing import Protocol


class SessionProvider(Protocol):
    """Interface for the signed-in user of a backend."""

    def current_user(self) -> str | None:
        """Id of the signed-in user, or None when signed out."""
        ...

    def sign_in(self, email: str, password: str) -> str:
        """Sign in with a password. Returns the user id."""
        ...

    def sign_out(self) -> None:
        ...
