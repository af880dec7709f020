from __future__ import annotations

from ..db import DbConfig, get_conn
from ..repository import schema


def ensure_db_schema(config: DbConfig | None = None):
    with get_conn(config) as conn:
        schema.ensure_schema(conn)
