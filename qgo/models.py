"""Shared dataclasses used across the dialect/session modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4


class DatabaseKind(str, Enum):
    """Database backends a profile can point at."""

    MYSQL = "MySQL"
    POSTGRESQL = "PostgreSQL"
    SQLITE = "SQLite"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ConnectionProfile:
    """Runtime representation of a connection profile.

    The password only ever lives here; the config store drops it on save.
    """

    name: str
    kind: DatabaseKind
    host: str = "localhost"
    port: int = 0
    username: str = ""
    password: str = field(default="", repr=False)
    database: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.host}:{self.port})"


@dataclass(frozen=True, slots=True)
class TableName:
    """A table name reported by the backend itself.

    Only these are interpolated into generated metadata queries; free-form
    user text has to be resolved against ``Session.list_tables`` first.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ResultSet:
    """Materialized, string-valued query output."""

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def is_empty(self) -> bool:
        return not self.rows

    def as_records(self) -> list[dict[str, str]]:
        """Rows keyed by column name; later duplicate names win."""

        return [dict(zip(self.columns, row)) for row in self.rows]


__all__ = ["ConnectionProfile", "DatabaseKind", "ResultSet", "TableName"]
