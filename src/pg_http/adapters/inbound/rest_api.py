"""REST API adapter for the HTTP gateway.

This module provides the FastAPI application exposing the embedded
database over HTTP/JSON.

Endpoints:
    GET    /health                - Health check
    POST   /query                 - Execute one SQL statement
    POST   /transaction           - Execute statements in one transaction
    GET    /tables                - List public tables
    GET    /tables/{name}/schema  - Column descriptions of a table
    GET    /export                - SQL dump download
    POST   /import                - Replay SQL text
    GET    /stats                 - Database and table sizes
    GET    /users                 - List users
    POST   /users                 - Create user
    GET    /users/{id}            - Get user
    PUT    /users/{id}            - Update user
    DELETE /users/{id}            - Delete user

Every failure is answered with ``{"success": false, "error": ..., "code": ...}``.
Errors a caller can trigger (bad SQL, constraint violations, bad bodies)
are 400; failures of introspection and aggregate queries, which are assumed
well-formed, are 500; identity-keyed routes answer 404 when no row matches.
No route is authenticated.

Usage:
    from pg_http.adapters.inbound.rest_api import create_app
    from pg_http.adapters.outbound import PostgresSession

    app = create_app(config, lambda: PostgresSession.connect(uri))
    # Run with uvicorn: uvicorn.run(app, host="0.0.0.0", port=3000)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pg_http import __version__
from pg_http.adapters.inbound.schemas import (
    ErrorResponse,
    HealthResponse,
    ImportRequest,
    MessageResponse,
    QueryRequest,
    QueryResponse,
    StatementResult,
    StatsResponse,
    TableSchemaResponse,
    TablesResponse,
    TransactionRequest,
    TransactionResponse,
    UserCreate,
    UserDeletedResponse,
    UserResponse,
    UsersResponse,
    UserUpdate,
)
from pg_http.application import DatabaseGateway, UserRepository, ensure_schema, parse_user_id
from pg_http.domain.errors import (
    FatalStartupError,
    InvalidRequestError,
    NotFoundError,
    PgHttpError,
    QueryError,
)
from pg_http.infrastructure.config import Config
from pg_http.infrastructure.logging import get_logger
from pg_http.infrastructure.metrics import MetricsRegistry
from pg_http.ports.outbound import DatabaseSession


logger = get_logger(__name__)

SessionFactory = Callable[[], Awaitable[DatabaseSession]]

ENDPOINTS = [
    "GET /health",
    "POST /query",
    "POST /transaction",
    "GET /tables",
    "GET /tables/{name}/schema",
    "GET /export",
    "POST /import",
    "GET /stats",
    "GET /users",
    "POST /users",
    "GET /users/{id}",
    "PUT /users/{id}",
    "DELETE /users/{id}",
]

DUMP_FILENAME = "pg-http-dump.sql"


def _error(status_code: int, exc: Exception | str, code: str | None = None) -> JSONResponse:
    """Build the failure envelope."""
    if isinstance(exc, QueryError) and code is None:
        code = exc.code
    body = ErrorResponse(error=str(exc), code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


class PayloadTooLargeError(HTTPException):
    def __init__(self, limit: int) -> None:
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request body exceeds {limit} bytes",
        )


class BodySizeLimitMiddleware:
    """Reject request bodies larger than ``max_body_bytes`` with 413.

    A declared Content-Length is checked before the request is routed.
    Bodies sent without one (chunked uploads) are counted as they are
    received, and reading past the limit aborts the request.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit() and int(length) > self.max_body_bytes:
            exc = PayloadTooLargeError(self.max_body_bytes)
            response = _error(exc.status_code, exc.detail, code="PAYLOAD_TOO_LARGE")
            await response(scope, receive, send)
            return

        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise PayloadTooLargeError(self.max_body_bytes)
            return message

        await self.app(scope, counting_receive, send)


def get_gateway(request: Request) -> DatabaseGateway:
    return request.app.state.gateway


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def create_app(
    config: Config,
    open_session: SessionFactory,
    metrics: MetricsRegistry | None = None,
) -> FastAPI:
    """Create a FastAPI application for the gateway.

    The session is opened and the schema bootstrapped during lifespan
    startup, i.e. before the server accepts connections.

    Args:
        config: Gateway configuration.
        open_session: Coroutine factory returning the shared session.
        metrics: Optional metrics registry (global one by default).

    Returns:
        A configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            session = await open_session()
            await ensure_schema(session)
        except PgHttpError as e:
            logger.critical("database_initialization_failed", error=str(e))
            raise FatalStartupError(f"Database initialization failed: {e}") from e

        app.state.gateway = DatabaseGateway(session, config.store_path, metrics)
        app.state.users = UserRepository(session)
        logger.info(
            "server_started",
            url=f"http://localhost:{config.port}",
            data_dir=str(config.store_path),
            endpoints=ENDPOINTS,
        )
        yield
        await session.close()

    app = FastAPI(
        title="pg-http",
        description="Embedded PostgreSQL over HTTP/JSON",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=config.server.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large(request: Request, exc: PayloadTooLargeError) -> JSONResponse:
        return _error(exc.status_code, exc.detail, code="PAYLOAD_TOO_LARGE")

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(
            status.HTTP_400_BAD_REQUEST,
            _describe_validation_error(exc),
            code="VALIDATION_ERROR",
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(gateway: DatabaseGateway = Depends(get_gateway)) -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            database="disconnected" if gateway.session.closed else "connected",
            data_dir=str(gateway.data_dir),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    # Generic SQL surface

    @app.post("/query", response_model=QueryResponse, tags=["SQL"])
    async def execute_query(
        body: QueryRequest, gateway: DatabaseGateway = Depends(get_gateway)
    ):
        """Execute one statement with positional parameters."""
        try:
            result = await gateway.query(body.query, body.params)
        except QueryError as e:
            return _error(status.HTTP_400_BAD_REQUEST, e)
        return QueryResponse.from_result(result)

    @app.post("/transaction", response_model=TransactionResponse, tags=["SQL"])
    async def execute_transaction(
        body: TransactionRequest, gateway: DatabaseGateway = Depends(get_gateway)
    ):
        """Execute statements in order inside BEGIN/COMMIT, rolling back on failure."""
        try:
            results = await gateway.transaction([q.to_statement() for q in body.queries])
        except QueryError as e:
            return _error(status.HTTP_400_BAD_REQUEST, e)
        return TransactionResponse(
            results=[StatementResult(rows=r.rows, row_count=r.row_count) for r in results]
        )

    # Catalog

    @app.get("/tables", response_model=TablesResponse, tags=["Catalog"])
    async def list_tables(gateway: DatabaseGateway = Depends(get_gateway)):
        try:
            tables = await gateway.list_tables()
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return TablesResponse(tables=tables)

    @app.get("/tables/{table_name}/schema", response_model=TableSchemaResponse, tags=["Catalog"])
    async def table_schema(table_name: str, gateway: DatabaseGateway = Depends(get_gateway)):
        try:
            columns = await gateway.table_schema(table_name)
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return TableSchemaResponse(table_name=table_name, columns=columns)

    @app.get("/stats", response_model=StatsResponse, tags=["Catalog"])
    async def get_stats(gateway: DatabaseGateway = Depends(get_gateway)):
        try:
            stats = await gateway.stats()
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return StatsResponse(**stats)

    # Dump

    @app.get("/export", tags=["Dump"])
    async def export_database(gateway: DatabaseGateway = Depends(get_gateway)) -> Response:
        """Download a SQL dump of the public schema."""
        try:
            dump = await gateway.export_sql()
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return Response(
            content=dump,
            media_type="application/sql",
            headers={"Content-Disposition": f'attachment; filename="{DUMP_FILENAME}"'},
        )

    @app.post("/import", response_model=MessageResponse, tags=["Dump"])
    async def import_database(body: ImportRequest, gateway: DatabaseGateway = Depends(get_gateway)):
        """Replay SQL text; not wrapped in a transaction."""
        try:
            await gateway.import_sql(body.sql)
        except QueryError as e:
            return _error(status.HTTP_400_BAD_REQUEST, e)
        return MessageResponse(message="SQL imported successfully")

    # Example CRUD

    @app.get("/users", response_model=UsersResponse, tags=["Users"])
    async def list_users(users: UserRepository = Depends(get_users)):
        try:
            rows = await users.list_all()
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return UsersResponse(users=rows)

    @app.post(
        "/users",
        response_model=UserResponse,
        status_code=status.HTTP_201_CREATED,
        tags=["Users"],
    )
    async def create_user(body: UserCreate, users: UserRepository = Depends(get_users)):
        try:
            user = await users.create(body.name, body.email)
        except QueryError as e:
            return _error(status.HTTP_400_BAD_REQUEST, e)
        return UserResponse(user=user)

    @app.get("/users/{user_id}", response_model=UserResponse, tags=["Users"])
    async def get_user(user_id: str, users: UserRepository = Depends(get_users)):
        try:
            user = await users.get(parse_user_id(user_id))
        except NotFoundError as e:
            return _error(status.HTTP_404_NOT_FOUND, e)
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return UserResponse(user=user)

    @app.put("/users/{user_id}", response_model=UserResponse, tags=["Users"])
    async def update_user(
        user_id: str, body: UserUpdate, users: UserRepository = Depends(get_users)
    ):
        try:
            user = await users.update(parse_user_id(user_id), name=body.name, email=body.email)
        except NotFoundError as e:
            return _error(status.HTTP_404_NOT_FOUND, e)
        except (InvalidRequestError, QueryError) as e:
            return _error(status.HTTP_400_BAD_REQUEST, e)
        return UserResponse(user=user)

    @app.delete("/users/{user_id}", response_model=UserDeletedResponse, tags=["Users"])
    async def delete_user(user_id: str, users: UserRepository = Depends(get_users)):
        try:
            user = await users.delete(parse_user_id(user_id))
        except NotFoundError as e:
            return _error(status.HTTP_404_NOT_FOUND, e)
        except QueryError as e:
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)
        return UserDeletedResponse(user=user)

    return app


def run_server(config: Config, open_session: SessionFactory) -> None:
    """Run the REST API server.

    Args:
        config: Gateway configuration (host and port).
        open_session: Coroutine factory returning the shared session.
    """
    import uvicorn

    app = create_app(config, open_session)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.port,
        lifespan="on",
        log_config=None,
    )
