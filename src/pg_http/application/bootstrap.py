"""Schema bootstrap for the example users table."""

from __future__ import annotations

from pg_http.infrastructure.logging import get_logger
from pg_http.ports.outbound import StatementRunner


logger = get_logger(__name__)

USERS_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


async def ensure_schema(runner: StatementRunner) -> None:
    """Create the users table unless a previous run already did."""
    logger.debug("ensuring_schema")
    await runner.run(USERS_TABLE_DDL)
    logger.info("schema_ready", tables=["users"])
