"""Application layer for the HTTP gateway.

The application layer orchestrates the session to fulfil use cases.

Exports:
    - DatabaseGateway: Generic SQL surface (query, transaction, catalog, dump)
    - UserRepository: Example CRUD over the users table
    - ensure_schema: Idempotent creation of the users table
"""

from pg_http.application.bootstrap import USERS_TABLE_DDL, ensure_schema
from pg_http.application.gateway import DatabaseGateway
from pg_http.application.users import UserRepository, parse_user_id

__all__ = [
    "DatabaseGateway",
    "UserRepository",
    "USERS_TABLE_DDL",
    "ensure_schema",
    "parse_user_id",
]
