"""Schema bootstrap for `database/schema.sql`.

Every statement in the schema file is idempotent, so applying it on each
start (AUTO_INIT_DB) or from `scripts/init_db.py` is safe.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)

# Database selection is driven by DB_CONFIG, never by the schema file.
_DATABASE_DIRECTIVES = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def _prepare(sql: str) -> str:
    return _LINE_COMMENT.sub("", _DATABASE_DIRECTIVES.sub("", sql))


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split on top-level ';' (quoted semicolons and escapes are left alone)."""
    quote = None
    start = 0
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "\\":
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


@contextmanager
def _server(target: DBConfig, *, with_database: bool = True):
    conn = mysql.connector.connect(**target.connect_kwargs(with_database=with_database), use_pure=True)
    try:
        yield conn
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with _server(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    statements = list(iter_sql_statements(_prepare(Path(schema_path).read_text(encoding="utf-8"))))
    with _server(target) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    logger.info("Applied %s schema statement(s) to %s/%s", len(statements), target.host, target.database)


def list_tables(db_config: dict) -> list[str]:
    with _server(DBConfig.from_dict(db_config)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(row[0]) for row in cur.fetchall())
