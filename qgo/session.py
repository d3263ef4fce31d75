"""Live database sessions and the manager that binds them to saved profiles."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Sequence
from uuid import UUID

from .config import AppConfig
from .connections import DatabasePool, open_pool
from .dialects import BackendDialect, dialect_for
from .errors import (
    ConnectionFailed,
    ConnectTimeout,
    NotConnected,
    ProfileNotFound,
    SessionClosed,
    TableNotFound,
)
from .gate import check_query
from .models import ConnectionProfile, DatabaseKind, ResultSet, TableName

LOG = logging.getLogger(__name__)

NULL_TEXT = "NULL"

SessionListener = Callable[["SessionState"], None]


class Session:
    """One open pool bound to one profile, plus its metadata caches.

    Caches start absent and are trusted once filled; ``invalidate_cache`` is
    the only way to drop them and it always drops everything.
    """

    def __init__(
        self,
        profile: ConnectionProfile,
        pool: DatabasePool,
        dialect: BackendDialect | None = None,
    ) -> None:
        self._profile = profile
        self._pool = pool
        self._dialect = dialect or dialect_for(profile.kind)
        self._tables_cache: tuple[TableName, ...] | None = None
        self._columns_cache: dict[str, tuple[str, ...]] | None = None
        self._cache_lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def connect(cls, profile: ConnectionProfile, timeout: float) -> Session:
        """Open a pool for ``profile`` within ``timeout`` seconds."""

        dialect = dialect_for(profile.kind)
        LOG.info("Connecting to %s database at %s:%s...", profile.kind, profile.host, profile.port)
        pool = await _open_pool_within(profile, dialect, timeout)
        return cls(profile, pool, dialect)

    @staticmethod
    async def test_connection(profile: ConnectionProfile, timeout: float) -> None:
        """Open a throwaway pool, acquire one connection, and close it again."""

        dialect = dialect_for(profile.kind)
        LOG.info("Testing connection to %s database at %s:%s...", profile.kind, profile.host, profile.port)
        pool = await _open_pool_within(profile, dialect, timeout)
        try:
            await pool.ping()
        finally:
            await pool.close()

    @property
    def profile(self) -> ConnectionProfile:
        return self._profile

    @property
    def dialect(self) -> BackendDialect:
        return self._dialect

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def cached_tables(self) -> tuple[TableName, ...] | None:
        return self._tables_cache

    async def execute(self, query: str) -> ResultSet:
        """Run a read-only statement and materialize it as strings."""

        check_query(query)
        self._ensure_open()
        fetched = await self._pool.fetch(query)
        if not fetched.rows or not fetched.columns:
            return ResultSet()
        width = len(fetched.columns)
        rows = tuple(
            tuple(_cell_text(row, index) for index in range(width))
            for row in fetched.rows
        )
        return ResultSet(columns=fetched.columns, rows=rows)

    async def list_tables(self) -> tuple[TableName, ...]:
        """Table names reported by the backend, cached after the first call."""

        self._ensure_open()
        async with self._cache_lock:
            if self._tables_cache is not None:
                return self._tables_cache
            fetched = await self._pool.fetch(self._dialect.tables_query)
            tables = tuple(TableName(name) for name in _names_at(fetched.rows, 0))
            self._tables_cache = tables
            LOG.debug("Cached %d tables for %s", len(tables), self._profile.name)
            return tables

    async def list_columns(self, table: TableName) -> tuple[str, ...]:
        """Column names of ``table``, cached per table."""

        self._ensure_open()
        async with self._cache_lock:
            if self._columns_cache is not None and table.value in self._columns_cache:
                return self._columns_cache[table.value]
            fetched = await self._pool.fetch(self._dialect.columns_query(table))
            columns = _names_at(fetched.rows, self._dialect.column_name_index)
            if self._columns_cache is None:
                self._columns_cache = {}
            self._columns_cache[table.value] = columns
            LOG.debug("Cached %d columns for %s.%s", len(columns), self._profile.name, table)
            return columns

    def invalidate_cache(self) -> None:
        self._tables_cache = None
        self._columns_cache = None

    async def refresh_cache(self) -> None:
        """Invalidate, then eagerly reload tables and every table's columns.

        The first failing table aborts the refresh; tables after it stay
        uncached.
        """

        self.invalidate_cache()
        for table in await self.list_tables():
            await self.list_columns(table)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.invalidate_cache()
        await self._pool.close()
        LOG.debug("Closed session for %s", self._profile.name)

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosed(f"Session for '{self._profile.name}' is closed.")


async def _open_pool_within(
    profile: ConnectionProfile,
    dialect: BackendDialect,
    timeout: float,
) -> DatabasePool:
    dsn = dialect.connection_string(profile)
    try:
        return await asyncio.wait_for(open_pool(profile.kind, dsn), timeout)
    except asyncio.TimeoutError as exc:
        LOG.warning("Connection timeout after %g seconds", timeout)
        raise ConnectTimeout(f"{profile.kind} at {profile.host}:{profile.port}", timeout) from exc
    except ConnectionFailed as exc:
        LOG.error("Database connection failed: %s", exc)
        raise


def _cell_text(row: Sequence[Any], index: int) -> str:
    # Best effort: anything that cannot be read as text degrades to NULL.
    try:
        value = row[index]
    except (IndexError, KeyError, TypeError):
        return NULL_TEXT
    if value is None:
        return NULL_TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return NULL_TEXT
    try:
        return str(value)
    except Exception:
        return NULL_TEXT


def _names_at(rows: Sequence[Sequence[Any]], index: int) -> tuple[str, ...]:
    names: list[str] = []
    for row in rows:
        if len(row) <= index or row[index] is None:
            continue
        names.append(_cell_text(row, index))
    return tuple(names)


@dataclass(frozen=True, slots=True)
class SessionState:
    """Current session snapshot (active profile + known tables)."""

    profile: ConnectionProfile
    connected: bool
    tables: tuple[str, ...]
    refreshed_at: datetime
    status: str = "Connected"
    latency_ms: int | None = None


class SessionManager:
    """Keeps the single active session and swaps it when profiles change."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._profiles = tuple(entry.to_profile() for entry in config.profiles)
        self._passwords: dict[UUID, str] = {}
        self._listeners: set[SessionListener] = set()
        self._session: Session | None = None
        self._state: SessionState | None = None

    @property
    def profiles(self) -> tuple[ConnectionProfile, ...]:
        """Profiles available in the current config."""

        return self._profiles

    @property
    def state(self) -> SessionState | None:
        return self._state

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def active_profile_name(self) -> str | None:
        if self._state and self._state.connected:
            return self._state.profile.name
        return None

    def update_config(self, config: AppConfig) -> None:
        """Swap in a new config (e.g. after profiles were added or removed)."""

        self._config = config
        self._profiles = tuple(entry.to_profile() for entry in config.profiles)

    def needs_password(self, name: str) -> bool:
        profile = self.profile_by_name(name)
        if profile.kind is DatabaseKind.SQLITE:
            return False
        return profile.id not in self._passwords

    def profile_by_name(self, name: str) -> ConnectionProfile:
        for profile in self._profiles:
            if profile.name == name:
                return profile
        raise ProfileNotFound(name)

    async def connect(self, name: str, password: str | None = None) -> SessionState:
        """Open a session for the named profile, replacing the active one.

        A failed attempt leaves the previous session untouched.
        """

        profile = self.profile_by_name(name)
        if password is not None:
            self._passwords[profile.id] = password
        profile = replace(profile, password=self._passwords.get(profile.id, ""))
        timeout = float(self._config.settings.query_timeout_seconds)
        started = time.perf_counter()
        session = await Session.connect(profile, timeout)
        latency_ms = int((time.perf_counter() - started) * 1000)
        previous, self._session = self._session, session
        if previous is not None:
            await previous.close()
        self._update_state(profile, tables=(), status="Connected", latency_ms=latency_ms)
        return self._state

    async def run_query(self, sql: str) -> ResultSet:
        return await self._require_session().execute(sql)

    async def list_tables(self) -> tuple[TableName, ...]:
        session = self._require_session()
        tables = await session.list_tables()
        self._publish_tables(session, tables)
        return tables

    async def describe(self, name: str) -> tuple[str, ...]:
        """Columns of the table the backend reports under ``name``."""

        session = self._require_session()
        table = _resolve_table(await self.list_tables(), name)
        return await session.list_columns(table)

    async def refresh(self) -> tuple[TableName, ...]:
        """Reload every cached table and column list for the active session."""

        session = self._require_session()
        await session.refresh_cache()
        tables = session.cached_tables or ()
        self._publish_tables(session, tables, status="Refreshed")
        return tables

    async def close(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        await session.close()
        if self._state:
            self._state = replace(self._state, connected=False, status="Disconnected")
            self._notify()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Subscribe to session updates; returns an unsubscribe handle."""

        self._listeners.add(listener)
        if self._state:
            listener(self._state)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    def _require_session(self) -> Session:
        if self._session is None or self._session.closed:
            raise NotConnected()
        return self._session

    def _publish_tables(
        self,
        session: Session,
        tables: Sequence[TableName],
        *,
        status: str | None = None,
    ) -> None:
        names = tuple(table.value for table in tables)
        if self._state and self._state.tables == names and status is None:
            return
        self._update_state(
            session.profile,
            tables=names,
            status=status or (self._state.status if self._state else "Connected"),
            latency_ms=self._state.latency_ms if self._state else None,
        )

    def _update_state(
        self,
        profile: ConnectionProfile,
        *,
        tables: tuple[str, ...],
        status: str,
        latency_ms: int | None,
    ) -> None:
        self._state = SessionState(
            profile=profile,
            connected=True,
            tables=tables,
            refreshed_at=datetime.now(tz=timezone.utc),
            status=status,
            latency_ms=latency_ms,
        )
        self._notify()

    def _notify(self) -> None:
        if not self._state:
            return
        for listener in tuple(self._listeners):
            listener(self._state)


def _resolve_table(tables: Sequence[TableName], name: str) -> TableName:
    wanted = name.strip()
    for table in tables:
        if table.value == wanted:
            return table
    folded = wanted.casefold()
    for table in tables:
        if table.value.casefold() == folded:
            return table
    raise TableNotFound(wanted)


__all__ = [
    "NULL_TEXT",
    "Session",
    "SessionListener",
    "SessionManager",
    "SessionState",
]
