"""
Database connection pool.

The pool is only created when DATABASE_URL is set. Every connection gets
JSON/JSONB codecs so tree columns read and write as Python dicts.
"""

from __future__ import annotations

import json

import asyncpg

from dynamic_todo.config import settings

pool: asyncpg.Pool | None = None


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    Sets up type codecs for JSON handling.
    """
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )
    await conn.set_type_codec(
        "json",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def create_pool(dsn: str, min_size: int = 2, max_size: int = 20) -> asyncpg.Pool:
    """Create a pool with the JSON codecs installed on every connection."""
    return await asyncpg.create_pool(
        dsn=dsn,
        min_size=min_size,
        max_size=max_size,
        command_timeout=60,
        init=_init_connection,
    )


async def init_pool() -> asyncpg.Pool:
    """
    Initialize the module-level pool.
    Called once at application startup.
    """
    global pool
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not set")
    pool = await create_pool(
        settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
    )
    return pool


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None
