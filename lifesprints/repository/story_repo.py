from __future__ import annotations

from sqlite3 import Connection

STORY_COLUMNS = (
    "id, user_id, title, description, year, is_completed, priority, "
    "estimated_hours, actual_hours, due_date, completed_at, created_at, updated_at"
)


def insert_story(
    conn: Connection,
    user_id: str,
    title: str,
    description: str | None,
    year: int,
    priority: int,
    estimated_hours,
    due_date: str | None,
    now: str,
) -> int:
    cur = conn.execute(
        "INSERT INTO stories(user_id, title, description, year, is_completed, priority, "
        "estimated_hours, actual_hours, due_date, completed_at, created_at, updated_at) "
        "VALUES(?,?,?,?,0,?,?,NULL,?,NULL,?,?)",
        (user_id, title, description, year, priority, estimated_hours, due_date, now, now),
    )
    return int(cur.lastrowid)


def get_story_owner_state(conn: Connection, story_id: int):
    return conn.execute(
        "SELECT id, user_id, is_completed FROM stories WHERE id=?",
        (story_id,),
    ).fetchone()


def set_completion(conn: Connection, story_id: int, completed: bool, now: str) -> None:
    conn.execute(
        "UPDATE stories SET is_completed=?, completed_at=?, updated_at=? WHERE id=?",
        (1 if completed else 0, now if completed else None, now, story_id),
    )


def list_for_user_year(conn: Connection, user_id: str, year: int):
    return conn.execute(
        f"SELECT {STORY_COLUMNS} FROM stories "
        "WHERE user_id=? AND year=? "
        "ORDER BY created_at ASC, id ASC",
        (user_id, year),
    ).fetchall()


def year_totals(conn: Connection, user_id: str, year: int):
    """单行汇总：总数、完成数、预估/实际工时合计（NULL 视为 0）"""
    return conn.execute(
        "SELECT COUNT(1) AS total_stories, "
        "COALESCE(SUM(CASE WHEN is_completed=1 THEN 1 ELSE 0 END), 0) AS completed_stories, "
        "COALESCE(SUM(estimated_hours), 0) AS total_estimated_hours, "
        "COALESCE(SUM(actual_hours), 0) AS total_actual_hours "
        "FROM stories WHERE user_id=? AND year=?",
        (user_id, year),
    ).fetchone()
