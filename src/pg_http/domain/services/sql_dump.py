"""SQL dump export and import.

Export reads the catalog to produce a plain-text dump of every table in the
``public`` schema: one ``CREATE TABLE IF NOT EXISTS`` per table followed by
one ``INSERT`` per row. The reconstruction is best effort. Column names,
types and NOT NULL survive; indexes, defaults, other constraints and
foreign keys do not.

Import replays arbitrary SQL text as a single multi-statement batch. It does
not wrap the text in a transaction, so a failure part-way through leaves the
earlier statements applied unless the text brings its own BEGIN/COMMIT.

Literal rendering:
    NULL for None, TRUE/FALSE for booleans, bare text for finite numbers,
    quoted 'NaN'/'Infinity' for non-finite ones, '\\x..' for bytes,
    ARRAY[...] for lists (quoted JSON when the column is json/jsonb),
    quoted JSON for dicts, and the quoted textual form for everything else
    (dates, times, UUIDs, network addresses, ranges).
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable

from pg_http.domain.value_objects import FieldInfo
from pg_http.ports.outbound import StatementRunner


JSON_TYPE_OIDS = frozenset({114, 3802})  # json, jsonb

LIST_TABLES_SQL = """
SELECT tablename
FROM pg_tables
WHERE schemaname = 'public'
ORDER BY tablename
"""

COLUMN_LIST_SQL = """
SELECT string_agg(
    quote_ident(column_name) || ' ' ||
    CASE
        WHEN data_type IN ('ARRAY', 'USER-DEFINED')
            THEN (quote_ident(udt_schema) || '.' || quote_ident(udt_name))::regtype::text
        ELSE data_type
    END ||
    CASE WHEN is_nullable = 'NO' THEN ' NOT NULL' ELSE '' END,
    ', ' ORDER BY ordinal_position
) AS column_list
FROM information_schema.columns
WHERE table_schema = 'public'
  AND table_name = $1
"""


def quote_identifier(name: str) -> str:
    """Double-quote an identifier, doubling embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def quote_string(text: str) -> str:
    """Single-quote a string literal, doubling embedded single quotes."""
    return "'" + text.replace("'", "''") + "'"


def sql_literal(value: Any, as_json: bool = False) -> str:
    """Render a Python value returned by the engine as a SQL literal.

    Args:
        value: A column value as decoded by the driver.
        as_json: Render containers as JSON text (json/jsonb columns) rather
            than as arrays.

    Returns:
        Literal text suitable for a VALUES list.
    """
    if value is None:
        return "NULL"
    if as_json:
        return quote_string(json.dumps(value))
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "'NaN'"
        if math.isinf(value):
            return "'Infinity'" if value > 0 else "'-Infinity'"
        return repr(value)
    if isinstance(value, Decimal):
        if value.is_nan():
            return "'NaN'"
        if value.is_infinite():
            return "'Infinity'" if value > 0 else "'-Infinity'"
        return str(value)
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "'\\x" + bytes(value).hex() + "'"
    if isinstance(value, list):
        if not value:
            return "'{}'"
        return "ARRAY[" + ", ".join(sql_literal(item) for item in value) + "]"
    if isinstance(value, dict):
        return quote_string(json.dumps(value))
    if isinstance(value, timedelta):
        return quote_string(
            f"{value.days} days {value.seconds} seconds {value.microseconds} microseconds"
        )
    if isinstance(value, datetime):
        return quote_string(value.isoformat(sep=" "))
    return quote_string(str(value))


def render_insert(table: str, row: dict[str, Any], fields: Iterable[FieldInfo] = ()) -> str:
    """Render one INSERT statement for a row, values in column order."""
    json_columns = {f.name for f in fields if f.data_type_id in JSON_TYPE_OIDS}
    values = ", ".join(
        sql_literal(value, as_json=name in json_columns) for name, value in row.items()
    )
    return f"INSERT INTO {quote_identifier(table)} VALUES ({values});"


async def export_dump(runner: StatementRunner, generated_at: datetime | None = None) -> str:
    """Produce a SQL dump of every table in the ``public`` schema.

    Args:
        runner: Where to read the catalog and the rows from.
        generated_at: Timestamp for the header; defaults to now (UTC).

    Returns:
        The complete dump text.

    Raises:
        QueryError: If any catalog or data query fails.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        "-- Database export",
        f"-- Generated: {generated_at.isoformat()}",
        "",
    ]

    tables = await runner.execute(LIST_TABLES_SQL)
    for table_row in tables.rows:
        table = table_row["tablename"]

        columns = await runner.execute(COLUMN_LIST_SQL, [table])
        column_list = (columns.first() or {}).get("column_list") or ""
        lines.append(f"CREATE TABLE IF NOT EXISTS {quote_identifier(table)} ({column_list});")
        lines.append("")

        data = await runner.execute(f"SELECT * FROM public.{quote_identifier(table)}")
        if data.rows:
            for row in data.rows:
                lines.append(render_insert(table, row, data.fields))
            lines.append("")

    return "\n".join(lines) + "\n"


async def import_dump(runner: StatementRunner, sql: str) -> None:
    """Replay SQL text as one multi-statement batch.

    Raises:
        QueryError: On the first failing statement.
    """
    await runner.run(sql)
