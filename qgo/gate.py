"""Read-only enforcement applied before any statement reaches a backend."""

from __future__ import annotations

from .errors import EmptyQuery, WriteOrUnsafeQuery

ALLOWED_PREFIXES = ("select", "show", "describe", "explain", "with")


def check_query(query: str) -> None:
    """Raise unless ``query`` textually looks like a read-only statement.

    This is a prefix check on the trimmed, lower-cased text and not a parser:
    anything starting with an allowed keyword passes, and the backend gets to
    reject whatever is syntactically wrong afterwards.

    Raises:
        EmptyQuery: if the query is blank.
        WriteOrUnsafeQuery: if it does not start with an allowed keyword.
    """
    trimmed = query.strip()
    if not trimmed:
        raise EmptyQuery()
    if not trimmed.lower().startswith(ALLOWED_PREFIXES):
        raise WriteOrUnsafeQuery()


def is_read_only(query: str) -> bool:
    """Quick boolean form of :func:`check_query`."""
    try:
        check_query(query)
    except (EmptyQuery, WriteOrUnsafeQuery):
        return False
    return True


__all__ = ["ALLOWED_PREFIXES", "check_query", "is_read_only"]
