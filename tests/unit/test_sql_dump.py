"""Unit tests for SQL dump export and import."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pg_http.domain.errors import QueryError
from pg_http.domain.services import (
    export_dump,
    import_dump,
    quote_identifier,
    render_insert,
    sql_literal,
)
from pg_http.domain.value_objects import FieldInfo, QueryResult


@pytest.mark.unit
class TestSqlLiteral:
    """Tests for literal rendering."""

    def test_null(self) -> None:
        assert sql_literal(None) == "NULL"
        assert sql_literal(None, as_json=True) == "NULL"

    def test_booleans(self) -> None:
        assert sql_literal(True) == "TRUE"
        assert sql_literal(False) == "FALSE"

    def test_numbers(self) -> None:
        assert sql_literal(42) == "42"
        assert sql_literal(-1.5) == "-1.5"
        assert sql_literal(Decimal("9.99")) == "9.99"

    def test_non_finite_numbers_are_quoted(self) -> None:
        assert sql_literal(float("nan")) == "'NaN'"
        assert sql_literal(float("inf")) == "'Infinity'"
        assert sql_literal(float("-inf")) == "'-Infinity'"
        assert sql_literal(Decimal("NaN")) == "'NaN'"

    def test_string_quotes_are_doubled(self) -> None:
        assert sql_literal("O'Brien") == "'O''Brien'"
        assert sql_literal("") == "''"

    def test_string_with_newline_stays_inside_quotes(self) -> None:
        assert sql_literal("a\nb") == "'a\nb'"

    def test_bytes(self) -> None:
        assert sql_literal(b"\x00\xff") == "'\\x00ff'"

    def test_lists_become_arrays(self) -> None:
        assert sql_literal([1, 2, 3]) == "ARRAY[1, 2, 3]"
        assert sql_literal(["a", None]) == "ARRAY['a', NULL]"
        assert sql_literal([]) == "'{}'"

    def test_json_rendering(self) -> None:
        assert sql_literal({"k": "it's"}) == "'{\"k\": \"it''s\"}'"
        assert sql_literal([1, 2], as_json=True) == "'[1, 2]'"

    def test_temporal_and_other_values(self) -> None:
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert sql_literal(moment) == "'2024-01-02 03:04:05+00:00'"
        assert sql_literal(date(2024, 1, 2)) == "'2024-01-02'"
        assert sql_literal(timedelta(days=1, seconds=5)) == "'1 days 5 seconds 0 microseconds'"
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert sql_literal(value) == "'12345678-1234-5678-1234-567812345678'"

    def test_quote_identifier(self) -> None:
        assert quote_identifier("users") == '"users"'
        assert quote_identifier('we"ird') == '"we""ird"'


@pytest.mark.unit
class TestRenderInsert:
    def test_values_in_column_order(self) -> None:
        row = {"id": 1, "name": "Ann", "note": None}

        assert render_insert("people", row) == "INSERT INTO \"people\" VALUES (1, 'Ann', NULL);"

    def test_json_columns_use_json_text(self) -> None:
        row = {"id": 1, "tags": ["a", "b"], "labels": ["x"]}
        fields = [FieldInfo("id", 23), FieldInfo("tags", 3802), FieldInfo("labels", 1009)]

        sql = render_insert("t", row, fields)

        assert sql == "INSERT INTO \"t\" VALUES (1, '[\"a\", \"b\"]', ARRAY['x']);"


@pytest.mark.unit
class TestExportDump:
    """Tests for export_dump against a scripted session."""

    @pytest.mark.anyio
    async def test_export_tables_and_rows(self, fake_session) -> None:
        fake_session.respond("FROM pg_tables", QueryResult(rows=[{"tablename": "items"}, {"tablename": "empty"}]))
        fake_session.respond(
            "information_schema.columns",
            QueryResult(rows=[{"column_list": "id integer NOT NULL, label text"}]),
        )
        fake_session.respond(
            'FROM public."items"',
            QueryResult(
                rows=[{"id": 1, "label": "it's"}, {"id": 2, "label": None}],
                fields=[FieldInfo("id", 23), FieldInfo("label", 25)],
            ),
        )
        fake_session.respond(
            "information_schema.columns",
            QueryResult(rows=[{"column_list": "x integer"}]),
        )

        dump = await export_dump(fake_session, datetime(2024, 5, 1, tzinfo=timezone.utc))

        assert dump.startswith("-- Database export\n-- Generated: 2024-05-01T00:00:00+00:00\n")
        assert 'CREATE TABLE IF NOT EXISTS "items" (id integer NOT NULL, label text);' in dump
        assert "INSERT INTO \"items\" VALUES (1, 'it''s');" in dump
        assert 'INSERT INTO "items" VALUES (2, NULL);' in dump
        assert 'CREATE TABLE IF NOT EXISTS "empty" (x integer);' in dump
        assert dump.index('"items"') < dump.index('"empty"')
        assert 'INSERT INTO "empty"' not in dump

    @pytest.mark.anyio
    async def test_column_lookup_is_parameterized(self, fake_session) -> None:
        fake_session.respond("FROM pg_tables", QueryResult(rows=[{"tablename": "a'b"}]))

        dump = await export_dump(fake_session)

        lookups = [params for sql, params in fake_session.statements if "information_schema" in sql]
        assert lookups == [["a'b"]]
        assert 'CREATE TABLE IF NOT EXISTS "a\'b" ();' in dump

    @pytest.mark.anyio
    async def test_export_empty_database(self, fake_session) -> None:
        dump = await export_dump(fake_session)

        assert "CREATE TABLE" not in dump
        assert dump.startswith("-- Database export")

    @pytest.mark.anyio
    async def test_export_propagates_query_error(self, fake_session) -> None:
        fake_session.respond("FROM pg_tables", QueryError("catalog unavailable", "XX000"))

        with pytest.raises(QueryError):
            await export_dump(fake_session)


@pytest.mark.unit
class TestImportDump:
    @pytest.mark.anyio
    async def test_import_runs_text_once(self, fake_session) -> None:
        script = "CREATE TABLE t (x int); INSERT INTO t VALUES (1);"

        await import_dump(fake_session, script)

        assert fake_session.sql() == [script]

    @pytest.mark.anyio
    async def test_import_error(self, fake_session) -> None:
        fake_session.respond("INSERT", QueryError('relation "t" does not exist', "42P01"))

        with pytest.raises(QueryError) as excinfo:
            await import_dump(fake_session, "INSERT INTO t VALUES (1)")

        assert excinfo.value.code == "42P01"
