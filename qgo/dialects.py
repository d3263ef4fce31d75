"""Per-backend connection strings and metadata queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping
from urllib.parse import quote

from sqlglot import exp

from .models import ConnectionProfile, DatabaseKind, TableName


@dataclass(frozen=True, slots=True)
class BackendDialect:
    """Static description of how to talk to one database kind."""

    kind: DatabaseKind
    scheme: str
    default_port: int
    tables_query: str
    columns_template: Callable[[str], str]
    column_name_index: int
    sqlglot_dialect: str

    def connection_string(self, profile: ConnectionProfile) -> str:
        if self.kind is DatabaseKind.SQLITE:
            return _sqlite_url(profile.database)
        return (
            f"{self.scheme}://{_encode(profile.username)}:{_encode(profile.password)}"
            f"@{profile.host}:{profile.port}/{_encode(profile.database)}"
        )

    def columns_query(self, table: TableName) -> str:
        return self.columns_template(self._quote(table.value))

    def _quote(self, name: str) -> str:
        if self.kind is DatabaseKind.POSTGRESQL:
            return exp.Literal.string(name).sql(dialect=self.sqlglot_dialect)
        return exp.to_identifier(name, quoted=True).sql(dialect=self.sqlglot_dialect)


def _encode(value: str) -> str:
    return quote(value, safe="")


def _sqlite_url(path: str) -> str:
    # Anything with a colon (drive letters, URIs) is taken as already qualified.
    if path.startswith("/") or ":" in path:
        return f"sqlite://{path}"
    return f"sqlite://./{path}"


DIALECTS: Mapping[DatabaseKind, BackendDialect] = {
    DatabaseKind.MYSQL: BackendDialect(
        kind=DatabaseKind.MYSQL,
        scheme="mysql",
        default_port=3306,
        tables_query="SHOW TABLES",
        columns_template=lambda table: f"SHOW COLUMNS FROM {table}",
        column_name_index=0,
        sqlglot_dialect="mysql",
    ),
    DatabaseKind.POSTGRESQL: BackendDialect(
        kind=DatabaseKind.POSTGRESQL,
        scheme="postgresql",
        default_port=5432,
        tables_query="SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'",
        columns_template=lambda table: (
            "SELECT column_name FROM information_schema.columns "
            f"WHERE table_name = {table} AND table_schema = 'public'"
        ),
        column_name_index=0,
        sqlglot_dialect="postgres",
    ),
    DatabaseKind.SQLITE: BackendDialect(
        kind=DatabaseKind.SQLITE,
        scheme="sqlite",
        default_port=0,
        tables_query="SELECT name FROM sqlite_master WHERE type='table'",
        # PRAGMA rows are (cid, name, type, notnull, dflt_value, pk).
        columns_template=lambda table: f"PRAGMA table_info({table})",
        column_name_index=1,
        sqlglot_dialect="sqlite",
    ),
}


def dialect_for(kind: DatabaseKind) -> BackendDialect:
    """Return the dialect record for ``kind``."""

    return DIALECTS[DatabaseKind(kind)]


def connection_string(profile: ConnectionProfile) -> str:
    """Build the driver URL for ``profile``."""

    return dialect_for(profile.kind).connection_string(profile)


__all__ = ["BackendDialect", "DIALECTS", "connection_string", "dialect_for"]
