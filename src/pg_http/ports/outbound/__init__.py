"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for systems the gateway depends on,
which here is only the embedded database engine.
"""

from pg_http.ports.outbound.database_session import DatabaseSession, StatementRunner

__all__ = [
    "DatabaseSession",
    "StatementRunner",
]
