"""Outbound adapters - concrete implementations of external dependencies.

Exports:
    - StorageLocation: Store directory preparation and checks
    - EmbeddedPostgres: Launcher for the embedded engine
    - PostgresSession: The shared psycopg session (DatabaseSession)
"""

from pg_http.adapters.outbound.embedded_postgres import EmbeddedPostgres
from pg_http.adapters.outbound.postgres_session import PostgresSession
from pg_http.adapters.outbound.storage_location import StorageLocation

__all__ = [
    "EmbeddedPostgres",
    "PostgresSession",
    "StorageLocation",
]
