"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts. The
gateway has a single outbound port, the database session; its inbound
side is the HTTP API itself.
"""

from pg_http.ports.outbound import DatabaseSession, StatementRunner

__all__ = [
    "DatabaseSession",
    "StatementRunner",
]
