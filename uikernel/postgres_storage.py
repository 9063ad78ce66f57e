"""
PostgresStorage adapter for the UI state store.

Implements the StateStorage protocol on two tables (see alembic migrations):
- ui_states:  one row per subject, the current tree and its version
- ui_changes: append-only change log, trimmed to the newest entries

The pool must be created with JSON/JSONB codecs (dynamic_todo.db.create_pool)
so tree columns decode to dicts.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import asyncpg

from uikernel.store import StateStorage
from uikernel.types import MAX_HISTORY_ENTRIES


def _to_ts(value: str) -> datetime:
    if not value:
        return datetime.now(UTC)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _from_ts(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _row_to_state(row: asyncpg.Record) -> dict[str, Any]:
    return {
        "version": row["version"],
        "userId": row["user_id"],
        "tree": row["tree"],
        "lastModified": _from_ts(row["last_modified"]),
    }


def _row_to_change(row: asyncpg.Record) -> dict[str, Any]:
    return {
        "id": row["id"],
        "timestamp": _from_ts(row["timestamp"]),
        "description": row["description"],
        "beforeTree": row["before_tree"],
        "afterTree": row["after_tree"],
        "triggeredBy": row["triggered_by"],
    }


class PostgresStorage(StateStorage):
    """Postgres-based storage for per-subject UI state."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def get(self, user_id: str) -> dict[str, Any] | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT user_id, version, tree, last_modified FROM ui_states WHERE user_id = $1",
                user_id,
            )
            return _row_to_state(row) if row else None

    async def create(self, user_id: str, record: dict[str, Any]) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                INSERT INTO ui_states (user_id, version, tree, last_modified)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (user_id) DO NOTHING
                """,
                user_id,
                record["version"],
                record["tree"],
                _to_ts(record.get("lastModified", "")),
            )
            return result == "INSERT 0 1"

    async def swap(self, user_id: str, expected_version: int, record: dict[str, Any]) -> bool:
        # Single conditional UPDATE: the version check and the write cannot interleave
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE ui_states
                SET version = $3, tree = $4, last_modified = $5
                WHERE user_id = $1 AND version = $2
                """,
                user_id,
                expected_version,
                record["version"],
                record["tree"],
                _to_ts(record.get("lastModified", "")),
            )
            return result == "UPDATE 1"

    async def delete(self, user_id: str) -> None:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute("DELETE FROM ui_changes WHERE user_id = $1", user_id)
                await conn.execute("DELETE FROM ui_states WHERE user_id = $1", user_id)

    async def append_change(self, user_id: str, entry: dict[str, Any]) -> None:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                await conn.execute(
                    """
                    INSERT INTO ui_changes (id, user_id, timestamp, description, before_tree, after_tree, triggered_by)
                    VALUES ($1, $2, $3, $4, $5, $6, $7)
                    """,
                    entry["id"],
                    user_id,
                    _to_ts(entry.get("timestamp", "")),
                    entry.get("description", ""),
                    entry.get("beforeTree", {}),
                    entry.get("afterTree", {}),
                    entry.get("triggeredBy"),
                )
                await conn.execute(
                    """
                    DELETE FROM ui_changes
                    WHERE user_id = $1 AND seq NOT IN (
                        SELECT seq FROM ui_changes WHERE user_id = $1 ORDER BY seq DESC LIMIT $2
                    )
                    """,
                    user_id,
                    MAX_HISTORY_ENTRIES,
                )

    async def list_changes(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, timestamp, description, before_tree, after_tree, triggered_by
                FROM ui_changes WHERE user_id = $1
                ORDER BY seq DESC
                LIMIT $2
                """,
                user_id,
                limit,
            )
            return [_row_to_change(r) for r in rows]

    async def count_changes(self, user_id: str) -> int:
        async with self.pool.acquire() as conn:
            count = await conn.fetchval("SELECT count(*) FROM ui_changes WHERE user_id = $1", user_id)
            return count or 0
