"""Shared plumbing for SQLite repositories."""

import json
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from typing import Any

import aiosqlite
from pydantic import BaseModel

from fulfillment.core.exceptions import WriteConflictError

_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"


def to_db_timestamp(value: datetime | None) -> str | None:
    """Fixed-width UTC text so timestamps compare correctly as strings."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_TS_FORMAT)


def from_db_timestamp(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def to_db_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


def from_db_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def dump_models(models: Iterable[BaseModel]) -> str:
    return json.dumps([m.model_dump(mode="json") for m in models])


def dump_model(model: BaseModel | None) -> str | None:
    return model.model_dump_json() if model is not None else None


def load_json(value: str | None) -> Any:
    return json.loads(value) if value else None


class SQLiteRepository:
    """Base class: every repository works on the unit of work's connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def _fetchone(self, sql: str, params: Sequence[Any] = ()) -> aiosqlite.Row | None:
        cursor = await self._conn.execute(sql, params)
        return await cursor.fetchone()

    async def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params)
        return list(await cursor.fetchall())

    async def _execute_versioned(
        self, entity: str, entity_id: str, sql: str, params: Sequence[Any]
    ) -> None:
        """Run a ``... WHERE id = ? AND version = ?`` statement; no row means a conflict."""
        cursor = await self._conn.execute(sql, params)
        if cursor.rowcount == 0:
            raise WriteConflictError(entity, entity_id, "record changed or removed concurrently")
