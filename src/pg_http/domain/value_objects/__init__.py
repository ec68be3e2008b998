"""Value objects for the gateway domain.

Exports:
    - FieldInfo: Name and type OID of a result column
    - QueryResult: Rows plus column metadata for one statement
    - Statement: SQL text with positional parameters
    - SqlParam: Accepted bind parameter values
    - to_bind_param / to_bind_params: Boundary-to-driver parameter conversion
"""

from pg_http.domain.value_objects.query_result import (
    FieldInfo,
    QueryResult,
    SqlParam,
    Statement,
    to_bind_param,
    to_bind_params,
)

__all__ = [
    "FieldInfo",
    "QueryResult",
    "SqlParam",
    "Statement",
    "to_bind_param",
    "to_bind_params",
]
