"""Driver pools hidden behind one uniform fetch/ping/close interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence, runtime_checkable
from urllib.parse import quote, unquote, urlsplit, urlunsplit

import aiomysql
import aiosqlite
import asyncpg

from .errors import ConnectionFailed, ExecutionFailed
from .models import DatabaseKind

LOG = logging.getLogger(__name__)

POOL_MAX_SIZE = 10
SQLITE_PREFIX = "sqlite://"
SQLITE_MEMORY = ":memory:"


@dataclass(frozen=True, slots=True)
class FetchedRows:
    """Raw rows as returned by a driver, before string normalization."""

    columns: tuple[str, ...]
    rows: tuple[Sequence[Any], ...]


@runtime_checkable
class DatabasePool(Protocol):
    """Protocol implemented by every driver pool."""

    async def fetch(self, sql: str) -> FetchedRows:
        """Run ``sql`` and materialize every row."""

    async def ping(self) -> None:
        """Acquire one connection to prove the pool is alive."""

    async def close(self) -> None:
        """Release every connection held by the pool."""


class _DriverPool(ABC):
    """Shared error wrapping around the driver-specific hooks."""

    label = "database"

    async def fetch(self, sql: str) -> FetchedRows:
        try:
            return await self._fetch(sql)
        except Exception as exc:
            raise ExecutionFailed(f"{self.label} query failed: {exc}") from exc

    async def ping(self) -> None:
        try:
            await self._ping()
        except Exception as exc:
            raise ConnectionFailed(f"Failed to acquire {self.label} connection: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._close()
        except Exception:  # pragma: no cover - best effort cleanup
            LOG.warning("Error while closing %s pool", self.label, exc_info=True)

    @abstractmethod
    async def _fetch(self, sql: str) -> FetchedRows: ...

    @abstractmethod
    async def _ping(self) -> None: ...

    @abstractmethod
    async def _close(self) -> None: ...


class AsyncpgPool(_DriverPool):
    """PostgreSQL pool backed by asyncpg."""

    label = "PostgreSQL"

    def __init__(self, pool: Any) -> None:
        self._pool = pool

    @classmethod
    async def open(cls, dsn: str) -> "AsyncpgPool":
        pool = await asyncpg.create_pool(dsn=dsn, min_size=1, max_size=POOL_MAX_SIZE)
        return cls(pool)

    async def _fetch(self, sql: str) -> FetchedRows:
        records = await self._pool.fetch(sql)
        columns = tuple(str(key) for key in records[0].keys()) if records else ()
        return FetchedRows(columns=columns, rows=tuple(tuple(record.values()) for record in records))

    async def _ping(self) -> None:
        async with self._pool.acquire():
            pass

    async def _close(self) -> None:
        await self._pool.close()


class AiomysqlPool(_DriverPool):
    """MySQL pool backed by aiomysql."""

    label = "MySQL"

    def __init__(self, pool: Any) -> None:
        self._pool = pool

    @classmethod
    async def open(cls, dsn: str) -> "AiomysqlPool":
        parts = urlsplit(dsn)
        database = unquote(parts.path.lstrip("/"))
        pool = await aiomysql.create_pool(
            host=parts.hostname or "localhost",
            port=parts.port or 3306,
            user=unquote(parts.username or ""),
            password=unquote(parts.password or ""),
            db=database or None,
            minsize=1,
            maxsize=POOL_MAX_SIZE,
            autocommit=True,
            charset="utf8mb4",
        )
        return cls(pool)

    async def _fetch(self, sql: str) -> FetchedRows:
        async with self._pool.acquire() as conn:
            async with conn.cursor() as cursor:
                await cursor.execute(sql)
                rows = await cursor.fetchall()
                columns = tuple(str(entry[0]) for entry in cursor.description or ())
        return FetchedRows(columns=columns, rows=tuple(tuple(row) for row in rows))

    async def _ping(self) -> None:
        async with self._pool.acquire():
            pass

    async def _close(self) -> None:
        self._pool.close()
        await self._pool.wait_closed()


class AiosqlitePool(_DriverPool):
    """SQLite "pool": a single read-only aiosqlite connection."""

    label = "SQLite"

    def __init__(self, connection: Any) -> None:
        self._conn = connection

    @classmethod
    async def open(cls, dsn: str) -> "AiosqlitePool":
        path = sqlite_path(dsn)
        if path == SQLITE_MEMORY:
            # A private, empty database; nothing written to it outlives the pool.
            connection = await aiosqlite.connect(SQLITE_MEMORY)
        else:
            connection = await aiosqlite.connect(f"file:{quote(path)}?mode=ro", uri=True)
        return cls(connection)

    async def _fetch(self, sql: str) -> FetchedRows:
        async with self._conn.execute(sql) as cursor:
            rows = await cursor.fetchall()
            columns = tuple(str(entry[0]) for entry in cursor.description or ())
        return FetchedRows(columns=columns, rows=tuple(tuple(row) for row in rows))

    async def _ping(self) -> None:
        async with self._conn.execute("SELECT 1") as cursor:
            await cursor.fetchone()

    async def _close(self) -> None:
        await self._conn.close()


PoolOpener = Callable[[str], Awaitable[DatabasePool]]

_OPENERS: Mapping[DatabaseKind, PoolOpener] = {
    DatabaseKind.MYSQL: AiomysqlPool.open,
    DatabaseKind.POSTGRESQL: AsyncpgPool.open,
    DatabaseKind.SQLITE: AiosqlitePool.open,
}


async def open_pool(kind: DatabaseKind, dsn: str) -> DatabasePool:
    """Open a driver pool for ``kind``; driver errors become ``ConnectionFailed``."""

    opener = _OPENERS[DatabaseKind(kind)]
    try:
        return await opener(dsn)
    except Exception as exc:
        raise ConnectionFailed(f"Failed to connect to {redact_dsn(dsn)}: {exc}") from exc


def sqlite_path(dsn: str) -> str:
    """Filesystem path embedded in a ``sqlite://`` connection string."""

    if dsn.startswith(SQLITE_PREFIX):
        return dsn[len(SQLITE_PREFIX):]
    return dsn


def redact_dsn(dsn: str) -> str:
    """Return ``dsn`` with any password masked."""

    parts = urlsplit(dsn)
    userinfo, at, host = parts.netloc.rpartition("@")
    if not at or ":" not in userinfo:
        return dsn
    # host:port is kept as text; it may not parse as a valid port.
    netloc = f"{userinfo.partition(':')[0]}:***@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


__all__ = [
    "AiomysqlPool",
    "AiosqlitePool",
    "AsyncpgPool",
    "DatabasePool",
    "FetchedRows",
    "POOL_MAX_SIZE",
    "open_pool",
    "redact_dsn",
    "sqlite_path",
]
