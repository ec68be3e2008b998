"""Database gateway - the use cases behind the generic SQL routes.

This module provides the DatabaseGateway class: ad hoc queries,
transaction batches, catalog introspection, statistics and SQL dump
export/import, all issued through the one shared session.

Usage:
    from pg_http.application import DatabaseGateway

    gateway = DatabaseGateway(session, data_dir=config.store_path)
    result = await gateway.query("SELECT * FROM users WHERE id = $1", [1])
    results = await gateway.transaction([
        Statement("INSERT INTO t VALUES ($1)", [1]),
        Statement("UPDATE counters SET n = n + 1"),
    ])
"""

from __future__ import annotations

import contextlib
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from pg_http.domain.errors import QueryError
from pg_http.domain.services import export_dump, import_dump
from pg_http.domain.services.sql_dump import LIST_TABLES_SQL
from pg_http.domain.value_objects import QueryResult, SqlParam, Statement
from pg_http.infrastructure.logging import get_logger
from pg_http.infrastructure.metrics import MetricsRegistry, get_metrics
from pg_http.ports.outbound import DatabaseSession


logger = get_logger(__name__)

TABLE_SCHEMA_SQL = """
SELECT
    column_name,
    data_type,
    is_nullable,
    column_default
FROM information_schema.columns
WHERE table_schema = 'public'
  AND table_name = $1
ORDER BY ordinal_position
"""

TABLE_SIZES_SQL = """
SELECT
    schemaname,
    tablename,
    pg_size_pretty(pg_total_relation_size(format('%I.%I', schemaname, tablename))) AS size
FROM pg_tables
WHERE schemaname = 'public'
ORDER BY tablename
"""

DATABASE_SIZE_SQL = """
SELECT pg_size_pretty(pg_database_size(current_database())) AS size
"""


class DatabaseGateway:
    """Entry point for the generic SQL surface.

    The gateway owns no state besides references to the session and the
    store directory; both are constructed once at startup and shared by
    every request.
    """

    def __init__(
        self,
        session: DatabaseSession,
        data_dir: str | Path,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._session = session
        self._data_dir = Path(data_dir)
        self._metrics = metrics or get_metrics()

    @property
    def session(self) -> DatabaseSession:
        return self._session

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    async def query(self, sql: str, params: Sequence[SqlParam] = ()) -> QueryResult:
        """Execute one statement with positional parameters."""
        return await self._session.execute(sql, params)

    async def transaction(self, statements: Sequence[Statement]) -> list[QueryResult]:
        """Execute statements in order inside BEGIN/COMMIT.

        Each statement finishes before the next starts, and the whole batch
        holds the session so no other request's statement runs in between.

        Args:
            statements: The batch, in execution order.

        Returns:
            One result per statement.

        Raises:
            QueryError: The first failure. The transaction has been rolled
                back and no partial results are returned. An error raised by
                the ROLLBACK itself is suppressed.
        """
        async with self._session.exclusive() as runner:
            await runner.run("BEGIN")
            try:
                results = [
                    await runner.execute(statement.sql, statement.params)
                    for statement in statements
                ]
                await runner.run("COMMIT")
            except Exception:
                with contextlib.suppress(QueryError):
                    await runner.run("ROLLBACK")
                self._metrics.transactions_total.labels(status="rollback").inc()
                logger.info("transaction_rolled_back", statements=len(statements))
                raise

        self._metrics.transactions_total.labels(status="commit").inc()
        return results

    async def list_tables(self) -> list[str]:
        """Names of the tables in the public schema, sorted."""
        result = await self._session.execute(LIST_TABLES_SQL)
        return [row["tablename"] for row in result.rows]

    async def table_schema(self, table_name: str) -> list[dict[str, Any]]:
        """Column descriptions of a public table, in ordinal order.

        An unknown table yields an empty list rather than an error.
        """
        result = await self._session.execute(TABLE_SCHEMA_SQL, [table_name])
        return result.rows

    async def stats(self) -> dict[str, Any]:
        """Pretty-printed database size and per-table sizes."""
        tables = await self._session.execute(TABLE_SIZES_SQL)
        size = await self._session.execute(DATABASE_SIZE_SQL)
        return {
            "database_size": (size.first() or {}).get("size"),
            "tables": tables.rows,
        }

    async def export_sql(self, generated_at: datetime | None = None) -> str:
        """Produce a SQL dump of the public schema.

        The dump is read under one hold of the session so that concurrent
        writes cannot land between two tables.
        """
        async with self._session.exclusive() as runner:
            dump = await export_dump(runner, generated_at)
        self._metrics.exports_total.inc()
        return dump

    async def import_sql(self, sql: str) -> None:
        """Replay SQL text as one batch, without transactional wrapping."""
        try:
            await import_dump(self._session, sql)
        except QueryError:
            self._metrics.imports_total.labels(status="error").inc()
            raise
        self._metrics.imports_total.labels(status="success").inc()
