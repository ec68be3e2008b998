"""PostgreSQL session over a single psycopg async connection.

This adapter implements the DatabaseSession protocol. One connection is
opened for the life of the process and every request's statements go
through it in turn.

Placeholders:
    Statements use PostgreSQL's native ``$1, $2, ...`` placeholders. The
    connection is created with ``AsyncRawCursor`` so psycopg passes them
    through untouched instead of expecting ``%s``.

Serialization:
    An ``asyncio.Lock`` guards the connection. Waiters are served in
    arrival order, so latency grows with queue depth and one slow statement
    delays everybody's database work (but not their other processing).
    ``exclusive()`` keeps the lock across several statements; the
    transaction endpoint relies on this so that nothing from another
    request lands between its BEGIN and COMMIT.

Durability:
    With ``relaxed_durability`` the session runs with
    ``synchronous_commit = off``: commits return before the WAL is flushed.
    A crash can lose the last few hundred milliseconds of commits but never
    corrupts the cluster.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

import psycopg
from psycopg.rows import dict_row

from pg_http.domain.errors import QueryError
from pg_http.domain.value_objects import FieldInfo, QueryResult, SqlParam, to_bind_params
from pg_http.infrastructure.logging import get_logger
from pg_http.infrastructure.metrics import MetricsRegistry, get_metrics
from pg_http.infrastructure.tracing import trace_span


logger = get_logger(__name__)


def _query_error(exc: psycopg.Error) -> QueryError:
    """Translate a driver exception, keeping the engine's message and SQLSTATE."""
    diag = getattr(exc, "diag", None)
    message = (diag.message_primary if diag is not None else None) or str(exc)
    return QueryError(message, code=exc.sqlstate)


def _span_attributes(operation: str, sql: str) -> dict[str, str]:
    return {"db.system": "postgresql", "db.operation": operation, "db.statement": sql}


class _Runner:
    """Statement runner bound to a connection, without taking the lock."""

    def __init__(self, conn: psycopg.AsyncConnection[dict[str, Any]], metrics: MetricsRegistry) -> None:
        self._conn = conn
        self._metrics = metrics

    async def execute(self, sql: str, params: Sequence[SqlParam] = ()) -> QueryResult:
        start = time.perf_counter()
        with trace_span("db.statement", _span_attributes("execute", sql)):
            try:
                cursor = await self._conn.execute(sql, to_bind_params(list(params)))
                if cursor.description is None:
                    rows: list[dict[str, Any]] = []
                    fields: list[FieldInfo] = []
                else:
                    rows = await cursor.fetchall()
                    fields = [FieldInfo(c.name, c.type_code) for c in cursor.description]
            except psycopg.Error as e:
                self._record("execute", "error", start)
                error = _query_error(e)
                logger.warning("statement_failed", error=error.message, code=error.code)
                raise error from e

        self._record("execute", "success", start)
        return QueryResult(rows=rows, fields=fields)

    async def run(self, sql: str) -> None:
        start = time.perf_counter()
        with trace_span("db.statement", _span_attributes("run", sql)):
            try:
                await self._conn.execute(sql)
            except psycopg.Error as e:
                self._record("run", "error", start)
                error = _query_error(e)
                logger.warning("statement_failed", error=error.message, code=error.code)
                raise error from e

        self._record("run", "success", start)

    def _record(self, kind: str, status: str, start: float) -> None:
        self._metrics.queries_total.labels(kind=kind, status=status).inc()
        self._metrics.query_latency_seconds.labels(kind=kind).observe(time.perf_counter() - start)


class PostgresSession:
    """The process-wide database session.

    Use ``connect()`` to create one; it must be awaited on the event loop
    that will serve requests.
    """

    def __init__(
        self,
        conn: psycopg.AsyncConnection[dict[str, Any]],
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._conn = conn
        self._lock = asyncio.Lock()
        self._runner = _Runner(conn, metrics or get_metrics())

    @classmethod
    async def connect(
        cls,
        uri: str,
        relaxed_durability: bool = True,
        metrics: MetricsRegistry | None = None,
    ) -> PostgresSession:
        """Open the session.

        Args:
            uri: Engine connection URI.
            relaxed_durability: Turn off synchronous commit for this session.
            metrics: Registry for statement metrics (global one by default).

        Raises:
            QueryError: If the connection or the session setup fails.
        """
        try:
            conn = await psycopg.AsyncConnection.connect(
                uri,
                autocommit=True,
                row_factory=dict_row,
                cursor_factory=psycopg.AsyncRawCursor,
            )
            if relaxed_durability:
                await conn.execute("SET synchronous_commit TO off")
        except psycopg.Error as e:
            raise _query_error(e) from e

        logger.info("session_opened", relaxed_durability=relaxed_durability)
        return cls(conn, metrics)

    @property
    def closed(self) -> bool:
        return self._conn.closed

    async def execute(self, sql: str, params: Sequence[SqlParam] = ()) -> QueryResult:
        async with self._lock:
            return await self._runner.execute(sql, params)

    async def run(self, sql: str) -> None:
        async with self._lock:
            await self._runner.run(sql)

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[_Runner]:
        async with self._lock:
            yield self._runner

    async def close(self) -> None:
        async with self._lock:
            await self._conn.close()
        logger.info("session_closed")
