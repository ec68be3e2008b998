"""Unit tests for result and parameter value objects."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from psycopg.types.json import Jsonb
from psycopg.types.range import Range

from pg_http.adapters.inbound.schemas import FieldModel, json_value
from pg_http.application import parse_user_id
from pg_http.domain.value_objects import (
    FieldInfo,
    QueryResult,
    Statement,
    to_bind_param,
    to_bind_params,
)


@pytest.mark.unit
class TestQueryResult:
    def test_row_count_matches_rows(self) -> None:
        result = QueryResult(rows=[{"a": 1}, {"a": 2}, {"a": 3}])

        assert result.row_count == 3
        assert result.first() == {"a": 1}

    def test_empty_result(self) -> None:
        result = QueryResult()

        assert result.row_count == 0
        assert result.first() is None
        assert result.fields == []

    def test_field_serialized_with_type_oid(self) -> None:
        model = FieldModel.from_field(FieldInfo("id", 23))

        assert model.model_dump(by_alias=True) == {"name": "id", "dataTypeID": 23}

    def test_statement_params_default(self) -> None:
        assert Statement("SELECT 1").params == []


@pytest.mark.unit
class TestBindParams:
    @pytest.mark.parametrize("value", [None, True, 0, -7, 2.5, "text", b"\x01"])
    def test_scalars_pass_through(self, value) -> None:
        assert to_bind_param(value) is value

    def test_containers_become_jsonb(self) -> None:
        bound = to_bind_param({"k": [1, 2]})

        assert isinstance(bound, Jsonb)
        assert bound.obj == {"k": [1, 2]}

    def test_order_preserved(self) -> None:
        bound = to_bind_params([1, ["x"], "y"])

        assert bound[0] == 1
        assert isinstance(bound[1], Jsonb)
        assert bound[2] == "y"


@pytest.mark.unit
class TestParseUserId:
    def test_integer_text(self) -> None:
        assert parse_user_id("42") == 42

    def test_non_integer_text_kept(self) -> None:
        assert parse_user_id("abc") == "abc"
        assert parse_user_id("1.5") == "1.5"


@pytest.mark.unit
class TestJsonValue:
    def test_bytea_rendered_as_hex(self) -> None:
        assert json_value(b"\xff\x00") == "\\xff00"
        assert json_value(memoryview(b"\x01")) == "\\x01"

    def test_range_rendered_as_text(self) -> None:
        assert json_value(Range(1, 5)) == "[1, 5)"

    def test_native_values_untouched(self) -> None:
        when = datetime(2024, 1, 1, 12, 30)
        amount = Decimal("9.99")

        assert json_value(when) is when
        assert json_value(amount) is amount
        assert json_value(None) is None

    def test_containers_converted_elementwise(self) -> None:
        value = {"blobs": [b"\xab", None], "span": Range(1, 3)}

        assert json_value(value) == {"blobs": ["\\xab", None], "span": "[1, 3)"}
