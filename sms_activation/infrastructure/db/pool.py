from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from sms_activation.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def get_pool() -> AsyncConnectionPool:
    """
    Lazily build the shared pool. It is created closed (open=False);
    the app lifespan or worker opens it.
    """
    global _pool
    if _pool is None:
        _pool = AsyncConnectionPool(
            get_settings().database_url,
            min_size=1,
            max_size=10,
            timeout=5,
            kwargs={"connect_timeout": 3, "application_name": "sms-activation"},
            open=False,
        )
    return _pool


async def open_pool() -> AsyncConnectionPool:
    pool = get_pool()
    await pool.open()
    return pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
