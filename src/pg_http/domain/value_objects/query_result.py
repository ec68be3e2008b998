"""Result and parameter types exchanged with the database session.

These value objects are what the session returns and what the API layer
serializes. They carry no behaviour beyond simple derivations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from psycopg.types.json import Jsonb


SqlParam = Union[None, bool, int, float, str, bytes, dict, list]
"""A bind parameter as it arrives at the boundary (decoded JSON, or bytes)."""


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """Description of one result column.

    Attributes:
        name: Column label as reported by the engine.
        data_type_id: PostgreSQL type OID of the column.
    """

    name: str
    data_type_id: int


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Rows and column metadata produced by one statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[FieldInfo] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        """Number of returned rows (not the number of rows affected)."""
        return len(self.rows)

    def first(self) -> dict[str, Any] | None:
        """Return the first row, or None for an empty result."""
        return self.rows[0] if self.rows else None


@dataclass(frozen=True, slots=True)
class Statement:
    """One SQL statement with its positional parameters."""

    sql: str
    params: list[SqlParam] = field(default_factory=list)


def to_bind_param(value: SqlParam) -> Any:
    """Convert a boundary value into something the driver can bind.

    Scalars pass through unchanged. JSON objects and arrays have no native
    positional-parameter form, so they are bound as ``jsonb``.
    """
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


def to_bind_params(values: list[SqlParam] | tuple[SqlParam, ...]) -> list[Any]:
    """Convert a whole parameter list, preserving order."""
    return [to_bind_param(value) for value in values]
