from __future__ import annotations

from sqlite3 import Connection


def insert_user(conn: Connection, user_id: str, email: str, display_name: str, now: str) -> None:
    conn.execute(
        "INSERT INTO users(id, email, display_name, created_at, updated_at, is_active) "
        "VALUES(?,?,?,?,?,1)",
        (user_id, email, display_name, now, now),
    )
