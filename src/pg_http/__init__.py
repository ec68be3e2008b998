"""
pg-http - Embedded PostgreSQL over HTTP

A single-process HTTP/JSON gateway in front of an embedded PostgreSQL
cluster: ad hoc queries, transactions, catalog introspection, SQL dump
export/import and example CRUD routes over a users table.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
