"""Pytest configuration and fixtures for pg_http tests."""

from __future__ import annotations

import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Generator, Sequence

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from pg_http.adapters.inbound.rest_api import create_app
from pg_http.domain.value_objects import QueryResult, SqlParam
from pg_http.infrastructure.config import Config, DatabaseConfig
from pg_http.infrastructure.metrics import MetricsRegistry


class FakeSession:
    """Scripted stand-in for the database session.

    Every statement is recorded. Responses are queued per SQL fragment and
    consumed by the first statement containing that fragment; statements
    with no queued response get an empty result.
    """

    def __init__(self) -> None:
        self.statements: list[tuple[str, list[Any]]] = []
        self.closed = False
        self._responses: list[tuple[str, QueryResult | Exception]] = []

    def respond(self, fragment: str, result: QueryResult | Exception) -> None:
        self._responses.append((fragment, result))

    def sql(self) -> list[str]:
        """Recorded statement texts, in order."""
        return [statement for statement, _ in self.statements]

    def _next(self, sql: str) -> QueryResult:
        for i, (fragment, result) in enumerate(self._responses):
            if fragment in sql:
                del self._responses[i]
                if isinstance(result, Exception):
                    raise result
                return result
        return QueryResult()

    async def execute(self, sql: str, params: Sequence[SqlParam] = ()) -> QueryResult:
        self.statements.append((sql.strip(), list(params)))
        return self._next(sql)

    async def run(self, sql: str) -> None:
        self.statements.append((sql.strip(), []))
        self._next(sql)

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[FakeSession]:
        yield self

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration rooted in a temporary directory."""
    return Config(
        data_dir=temp_dir / "data",
        database=DatabaseConfig(relaxed_durability=True),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(
    test_config: Config,
    fake_session: FakeSession,
    metrics_registry: MetricsRegistry,
) -> Generator[TestClient, None, None]:
    """A TestClient whose app runs against the fake session."""

    async def open_session() -> FakeSession:
        return fake_session

    app = create_app(test_config, open_session, metrics=metrics_registry)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests against a real engine")
    config.addinivalue_line("markers", "slow: Slow tests")
