"""
bizdesk/database.py — Доступ к PostgreSQL.

Хранилище документное: каждая коллекция живёт в таблице
``(id UUID, doc JSONB)`` (схема в ``bizdesk/db/migrations``). Каждое
соединение пула при открытии получает кодек ``jsonb``, поэтому
репозитории передают и получают обычные dict, без ручного
``json.dumps``/``json.loads``.

Пул ленивый: создаётся при первом обращении и закрывается в lifespan.
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import asyncpg

from bizdesk.config import get_settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


def encode_jsonb(value: Any) -> str:
    """dict/list → текст jsonb; даты и UUID сериализуются через ``str``."""
    return json.dumps(value, default=str, ensure_ascii=False)


async def _init_connection(conn: asyncpg.Connection) -> None:
    await conn.set_type_codec(
        "jsonb",
        encoder=encode_jsonb,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def get_pool() -> asyncpg.Pool:
    global _pool
    if _pool is not None:
        return _pool

    settings = get_settings()
    _pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.database_pool_min,
        max_size=settings.database_pool_max,
        command_timeout=settings.database_command_timeout,
        init=_init_connection,
    )
    logger.info(
        "PostgreSQL pool ready: size %d..%d, command timeout %ss",
        settings.database_pool_min,
        settings.database_pool_max,
        settings.database_command_timeout,
    )
    return _pool


async def close_pool() -> None:
    global _pool
    pool, _pool = _pool, None
    if pool is None:
        return
    await pool.close()
    logger.info("PostgreSQL pool closed")


@asynccontextmanager
async def get_connection() -> AsyncIterator[asyncpg.Connection]:
    """Соединение из пула на время блока ``async with``."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


async def check_connection() -> bool:
    """``SELECT 1`` для health-эндпоинта; ошибка соединения → False."""
    try:
        async with get_connection() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as exc:
        logger.warning("PostgreSQL is unreachable: %s", exc)
        return False
