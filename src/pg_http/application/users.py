"""Example CRUD use cases over the users table."""

from __future__ import annotations

from typing import Any

from pg_http.domain.errors import InvalidRequestError, NotFoundError
from pg_http.ports.outbound import StatementRunner


UserId = int | str
"""A parsed path id, or the raw text when it is not an integer."""


def parse_user_id(raw: str) -> UserId:
    """Parse a path id as an integer.

    Text that is not an integer is returned unchanged and bound as-is, so
    the engine reports the type error instead of the router.
    """
    try:
        return int(raw)
    except ValueError:
        return raw


class UserRepository:
    """Users table access through the shared session.

    Lookups, updates and deletes by id raise NotFoundError when no row
    matches; every other failure is the engine's QueryError.
    """

    def __init__(self, runner: StatementRunner) -> None:
        self._runner = runner

    async def list_all(self) -> list[dict[str, Any]]:
        result = await self._runner.execute("SELECT * FROM users ORDER BY id")
        return result.rows

    async def create(self, name: str, email: str) -> dict[str, Any]:
        result = await self._runner.execute(
            "INSERT INTO users (name, email) VALUES ($1, $2) RETURNING *",
            [name, email],
        )
        return result.rows[0]

    async def get(self, user_id: UserId) -> dict[str, Any]:
        result = await self._runner.execute("SELECT * FROM users WHERE id = $1", [user_id])
        return self._single(result.first())

    async def update(
        self,
        user_id: UserId,
        name: str | None = None,
        email: str | None = None,
    ) -> dict[str, Any]:
        """Replace only the supplied fields.

        Raises:
            InvalidRequestError: If neither name nor email is given.
            NotFoundError: If no user has this id.
        """
        assignments: list[str] = []
        values: list[Any] = []
        for column, value in (("name", name), ("email", email)):
            if value is not None:
                values.append(value)
                assignments.append(f"{column} = ${len(values)}")

        if not assignments:
            raise InvalidRequestError("No fields to update")

        values.append(user_id)
        result = await self._runner.execute(
            f"UPDATE users SET {', '.join(assignments)} WHERE id = ${len(values)} RETURNING *",
            values,
        )
        return self._single(result.first())

    async def delete(self, user_id: UserId) -> dict[str, Any]:
        result = await self._runner.execute("DELETE FROM users WHERE id = $1 RETURNING *", [user_id])
        return self._single(result.first())

    @staticmethod
    def _single(row: dict[str, Any] | None) -> dict[str, Any]:
        if row is None:
            raise NotFoundError("User not found")
        return row
