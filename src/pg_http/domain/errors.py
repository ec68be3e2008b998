"""Error taxonomy shared by the gateway layers.

Request-shape problems are reported by pydantic before any of these are
raised; everything here happens after a request was accepted.
"""

from __future__ import annotations


class PgHttpError(Exception):
    """Base class for gateway errors."""


class QueryError(PgHttpError):
    """The engine rejected a statement.

    Attributes:
        message: The engine's primary error message.
        code: The SQLSTATE reported by the engine, if any (e.g. ``23505``).
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class NotFoundError(PgHttpError):
    """An identity-keyed statement matched no rows."""


class InvalidRequestError(PgHttpError):
    """A well-formed request that cannot be acted upon."""


class FatalStartupError(PgHttpError):
    """The store or the engine cannot be brought up; the process must exit."""
