"""Exceptions shared by the core, the stores and the CLI."""


class ValidationError(ValueError):
    """Raised at the data-entry boundary for malformed input."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class AuthenticationError(Exception):
    """Raised when there is no usable session."""

    pass


class StoreError(Exception):
    """Raised when a backend request fails."""

    pass


class NotFoundError(KeyError):
    """Raised when no record matches an id."""

    def __str__(self) -> str:
        # KeyError repr-quotes its argument
        return str(self.args[0]) if self.args else ""
