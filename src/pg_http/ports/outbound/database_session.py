"""Database Session port.

This outbound port defines the contract for the single long-lived handle to
the embedded engine. Every request shares it; there is no pooling and no
per-request connection.

The session is responsible for:
- Executing parameterized statements and returning rows plus column metadata
- Running parameterless SQL (DDL, transaction control, multi-statement text)
- Serializing all statements into one queue
- Translating engine failures into QueryError
"""

from __future__ import annotations

from abc import abstractmethod
from typing import AsyncContextManager, Protocol, Sequence

from pg_http.domain.value_objects import QueryResult, SqlParam


class StatementRunner(Protocol):
    """Anything that can issue statements against the engine."""

    @abstractmethod
    async def execute(
        self, sql: str, params: Sequence[SqlParam] = ()
    ) -> QueryResult:
        """Execute one statement with positional ``$n`` parameters.

        Args:
            sql: Statement text.
            params: Values bound to ``$1``, ``$2``, ... in order.

        Returns:
            The rows (as column-name mappings) and field descriptions.
            Statements that return no rows yield an empty result.

        Raises:
            QueryError: On malformed SQL, constraint violations or type
                mismatches, carrying the engine's SQLSTATE.
        """
        ...

    @abstractmethod
    async def run(self, sql: str) -> None:
        """Run SQL without parameter binding or result rows.

        The text may contain several statements separated by semicolons.

        Raises:
            QueryError: If any statement fails. Earlier statements of the
                same text stay applied unless the text wraps itself in a
                transaction.
        """
        ...


class DatabaseSession(StatementRunner, Protocol):
    """Protocol for the process-wide session handle.

    Thread Safety:
        Statements from concurrent requests never overlap: each one waits
        for the previous to finish. ``exclusive()`` keeps the queue for a
        whole sequence of statements so that nothing else runs between them.
    """

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether the underlying connection has been closed."""
        ...

    @abstractmethod
    def exclusive(self) -> AsyncContextManager[StatementRunner]:
        """Hold the statement queue for the duration of the block.

        Other callers' statements wait until the block exits. The yielded
        runner must be used for statements inside the block; calling the
        session itself from inside would wait on its own hold.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""
        ...
