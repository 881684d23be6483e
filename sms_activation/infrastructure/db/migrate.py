from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import psycopg

from sms_activation.logging import setup_logging
from sms_activation.settings import get_settings

logger = logging.getLogger("sms_activation.migrate")

SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""

USAGE = "usage: python -m sms_activation.infrastructure.db.migrate [up|status|new <name>]"


def migrations_dir() -> Path:
    return Path(os.environ.get("MIGRATIONS_DIR", "migrations"))


def list_migrations(directory: Path | None = None) -> list[Path]:
    directory = directory or migrations_dir()
    if not directory.exists():
        raise FileNotFoundError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def pending_migrations(paths: list[Path], applied: set[str]) -> list[Path]:
    return [p for p in paths if p.stem not in applied]


def applied_versions(conn: psycopg.Connection) -> set[str]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations ORDER BY version;")
        return {row[0] for row in cur.fetchall()}


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    version = path.stem
    logger.info("applying migration", extra={"version": version})
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version, applied_at) VALUES (%s, now());",
            (version,),
        )
    conn.commit()
    logger.info("applied migration", extra={"version": version})


def cmd_up() -> int:
    with psycopg.connect(get_settings().database_url, autocommit=False) as conn:
        to_run = pending_migrations(list_migrations(), applied_versions(conn))
        conn.commit()
        if not to_run:
            logger.info("no pending migrations")
            return 0
        for path in to_run:
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                return 1
    return 0


def cmd_status() -> int:
    with psycopg.connect(get_settings().database_url) as conn:
        applied = applied_versions(conn)
    for path in list_migrations():
        state = "applied" if path.stem in applied else "pending"
        print(f"{state:8} {path.stem}")
    return 0


def cmd_new(name: str, directory: Path | None = None) -> Path:
    directory = directory or migrations_dir()
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M")
    path = directory / f"{stamp}_{name}.sql"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("-- write your SQL here\n", encoding="utf-8")
    return path


def main(argv: list[str]) -> int:
    setup_logging(get_settings().log_level)
    if len(argv) < 2:
        print(USAGE, file=sys.stderr)
        return 2
    cmd = argv[1]
    try:
        if cmd == "up":
            return cmd_up()
        if cmd == "status":
            return cmd_status()
        if cmd == "new" and len(argv) >= 3:
            print(cmd_new(argv[2]))
            return 0
    except FileNotFoundError as e:
        logger.error(str(e))
        return 2
    print(USAGE, file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
