"""Request and response models for the REST API.

Request models are the validators: FastAPI parses each body into one of
them before the handler runs, and a failure never reaches the database.
"""

from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from pg_http.domain.value_objects import FieldInfo, QueryResult, Statement


# Types pydantic renders natively in JSON mode. Other driver values, such as
# ranges, are sent as their text form.
_JSON_NATIVE = (bool, int, float, str, Decimal, date, time, timedelta, UUID)


def json_value(value: Any) -> Any:
    """Convert one column value into something the JSON encoder accepts.

    ``bytea`` is rendered in PostgreSQL's hex output form (``\\x00ff``);
    containers are converted element-wise.
    """
    if value is None or isinstance(value, _JSON_NATIVE):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    if isinstance(value, dict):
        return {str(k): json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_value(v) for v in value]
    return str(value)


def _json_row(row: dict[str, Any]) -> dict[str, Any]:
    return {name: json_value(value) for name, value in row.items()}


def _check_email(value: str) -> str:
    # Syntax only: the address is stored exactly as given, without case or
    # unicode normalization, and no DNS lookup is made.
    try:
        validate_email(value, check_deliverability=False, test_environment=True)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return value


Row = Annotated[dict[str, Any], AfterValidator(_json_row)]
Email = Annotated[str, AfterValidator(_check_email)]


# Requests


class QueryRequest(BaseModel):
    """A single statement with optional positional parameters."""

    query: str = Field(..., min_length=1, description="SQL statement with $1..$n placeholders")
    params: list[Any] = Field(default_factory=list, description="Values bound to $1..$n")

    def to_statement(self) -> Statement:
        return Statement(self.query, list(self.params))


class TransactionRequest(BaseModel):
    """Statements executed in order inside one transaction."""

    queries: list[QueryRequest] = Field(..., min_length=1, description="Statements, in order")


class ImportRequest(BaseModel):
    """Raw SQL text replayed as one batch."""

    sql: str = Field(..., min_length=1, description="SQL script")


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Email


class UserUpdate(BaseModel):
    """Partial update; at least one field must be present."""

    name: str | None = Field(None, min_length=1)
    email: Email | None = None


# Responses


class ErrorResponse(BaseModel):
    """Uniform failure envelope."""

    success: bool = False
    error: str
    code: str | None = None


class FieldModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    data_type_id: int = Field(..., alias="dataTypeID")

    @classmethod
    def from_field(cls, field: FieldInfo) -> FieldModel:
        return cls(name=field.name, data_type_id=field.data_type_id)


class QueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    rows: list[Row]
    row_count: int = Field(..., alias="rowCount")
    fields: list[FieldModel]

    @classmethod
    def from_result(cls, result: QueryResult) -> QueryResponse:
        return cls(
            rows=result.rows,
            row_count=result.row_count,
            fields=[FieldModel.from_field(f) for f in result.fields],
        )


class StatementResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rows: list[Row]
    row_count: int = Field(..., alias="rowCount")


class TransactionResponse(BaseModel):
    success: bool = True
    results: list[StatementResult]


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., description="Health status")
    database: str = Field(..., description="Session state")
    data_dir: str = Field(..., alias="dataDir", description="Store directory")
    timestamp: str = Field(..., description="ISO-8601 time of the check")


class TablesResponse(BaseModel):
    success: bool = True
    tables: list[str]


class TableSchemaResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    table_name: str = Field(..., alias="tableName")
    columns: list[dict[str, Any]]


class StatsResponse(BaseModel):
    success: bool = True
    database_size: str | None
    tables: list[dict[str, Any]]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserResponse(BaseModel):
    success: bool = True
    user: Row


class UsersResponse(BaseModel):
    success: bool = True
    users: list[Row]


class UserDeletedResponse(BaseModel):
    success: bool = True
    message: str = "User deleted"
    user: Row
