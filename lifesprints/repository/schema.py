from __future__ import annotations

import os
from sqlite3 import Connection

SCHEMA_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "schema.sql")


def read_schema() -> str:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return f.read()


def ensure_schema(conn: Connection) -> None:
    """Create tables and indexes if missing (idempotent)."""
    conn.executescript(read_schema())
