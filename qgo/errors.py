"""Exception hierarchy shared by the session layer and its callers."""

from __future__ import annotations


class QgoError(RuntimeError):
    """Base class for every error surfaced to the user."""


class ConnectTimeout(QgoError):
    """Raised when a pool does not become ready within the connect timeout."""

    def __init__(self, target: str, timeout: float) -> None:
        super().__init__(f"Connection to {target} timed out after {timeout:g} seconds.")
        self.target = target
        self.timeout = timeout


class ConnectionFailed(QgoError):
    """Raised when the backend rejects a connection attempt."""


class InvalidQuery(QgoError):
    """Raised when the query gate refuses a statement."""


class EmptyQuery(InvalidQuery):
    """Raised for blank query text."""

    def __init__(self) -> None:
        super().__init__("Query cannot be empty")


class WriteOrUnsafeQuery(InvalidQuery):
    """Raised for statements that do not look read-only."""

    def __init__(self) -> None:
        super().__init__("Only SELECT, SHOW, DESCRIBE, EXPLAIN, and WITH queries are allowed")


class ExecutionFailed(QgoError):
    """Raised when the backend fails while running a statement."""


class ProfileNotFound(QgoError):
    """Raised when a profile name or id is not in the config store."""

    def __init__(self, key: object) -> None:
        super().__init__(f"Connection not found: {key}")
        self.key = key


class TableNotFound(QgoError):
    """Raised when a table name is not among the tables the backend reported."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Table '{name}' not found.")
        self.name = name


class NotConnected(QgoError):
    """Raised when an operation needs an active session."""

    def __init__(self) -> None:
        super().__init__("No database connection available.")


class SessionClosed(QgoError):
    """Raised when a closed session is used."""


__all__ = [
    "ConnectTimeout",
    "ConnectionFailed",
    "EmptyQuery",
    "ExecutionFailed",
    "InvalidQuery",
    "NotConnected",
    "ProfileNotFound",
    "QgoError",
    "SessionClosed",
    "TableNotFound",
    "WriteOrUnsafeQuery",
]
