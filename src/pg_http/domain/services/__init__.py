"""Domain services for the gateway.

Exports:
    SQL dump:
        - export_dump: Catalog-driven SQL dump of the public schema
        - import_dump: Replay SQL text as one batch
        - sql_literal: Render a driver value as a SQL literal
        - quote_identifier: Double-quote an identifier
"""

from pg_http.domain.services.sql_dump import (
    export_dump,
    import_dump,
    quote_identifier,
    quote_string,
    render_insert,
    sql_literal,
)

__all__ = [
    "export_dump",
    "import_dump",
    "quote_identifier",
    "quote_string",
    "render_insert",
    "sql_literal",
]
