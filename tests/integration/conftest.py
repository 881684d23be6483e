import os
from pathlib import Path

import psycopg
import pytest
import pytest_asyncio

MIGRATIONS = Path(__file__).resolve().parents[2] / "migrations"


def _database_url() -> str:
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    return url


@pytest.fixture(scope="session")
def database_url() -> str:
    url = _database_url()
    # schema is applied once per session, outside the async loop
    with psycopg.connect(url, autocommit=True) as conn:
        for path in sorted(MIGRATIONS.glob("*.sql")):
            conn.execute(path.read_text(encoding="utf-8"))
    return url


@pytest_asyncio.fixture
async def conn(database_url):
    """A connection whose work is thrown away after the test."""
    aconn = await psycopg.AsyncConnection.connect(database_url)
    try:
        async with aconn.cursor() as cur:
            await cur.execute("TRUNCATE identities;")
        yield aconn
    finally:
        await aconn.rollback()
        await aconn.close()
