"""Database-side procedures.

SQLite has no stored routines, so each procedure is a named function that
runs its statements inside one transaction. The names and
ordered parameter lists in ``SIGNATURES`` are the contract the data-access
adapter binds against; renaming one side without the other breaks callers.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from sqlite3 import Connection
from typing import Any, Callable

from ..db import atomic
from ..domain.stats import year_stats
from . import story_repo, user_repo

logger = logging.getLogger(__name__)


class UnknownProcedureError(LookupError):
    pass


class ProcedureSignatureError(TypeError):
    pass


class StoryNotFoundError(LookupError):
    pass


class StoryOwnershipError(PermissionError):
    pass


def _now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def sp_create_user(conn: Connection, p_email: str, p_display_name: str) -> str:
    user_id = str(uuid.uuid4())
    now = _now()
    with atomic(conn):
        user_repo.insert_user(conn, user_id, p_email, p_display_name, now)
    return user_id


def sp_create_story(
    conn: Connection,
    p_user_id: str,
    p_title: str,
    p_description: str | None,
    p_year: int,
    p_priority: int | None,
    p_estimated_hours,
    p_due_date: str | None,
) -> int:
    priority = 0 if p_priority is None else p_priority
    now = _now()
    with atomic(conn):
        story_id = story_repo.insert_story(
            conn, p_user_id, p_title, p_description, p_year, priority, p_estimated_hours, p_due_date, now
        )
    return story_id


def sp_toggle_story_completion(conn: Connection, p_story_id: int, p_user_id: str | None) -> bool:
    with atomic(conn):
        row = story_repo.get_story_owner_state(conn, p_story_id)
        if row is None:
            raise StoryNotFoundError(f"story {p_story_id} not found")
        if p_user_id is not None and row["user_id"] != p_user_id:
            raise StoryOwnershipError(f"story {p_story_id} does not belong to user {p_user_id}")
        completed = not bool(row["is_completed"])
        story_repo.set_completion(conn, p_story_id, completed, _now())
    return completed


def sp_get_user_stories_by_year(conn: Connection, p_user_id: str, p_year: int) -> list:
    with atomic(conn, immediate=False):
        rows = story_repo.list_for_user_year(conn, p_user_id, p_year)
    return rows


def sp_get_user_year_stats(conn: Connection, p_user_id: str, p_year: int) -> dict:
    with atomic(conn, immediate=False):
        row = story_repo.year_totals(conn, p_user_id, p_year)
    return year_stats(
        p_year,
        row["total_stories"],
        row["completed_stories"],
        row["total_estimated_hours"],
        row["total_actual_hours"],
    )


PROCEDURES: dict[str, Callable[..., Any]] = {
    "sp_create_user": sp_create_user,
    "sp_create_story": sp_create_story,
    "sp_toggle_story_completion": sp_toggle_story_completion,
    "sp_get_user_stories_by_year": sp_get_user_stories_by_year,
    "sp_get_user_year_stats": sp_get_user_year_stats,
}

SIGNATURES: dict[str, tuple[str, ...]] = {
    "sp_create_user": ("p_email", "p_display_name"),
    "sp_create_story": (
        "p_user_id",
        "p_title",
        "p_description",
        "p_year",
        "p_priority",
        "p_estimated_hours",
        "p_due_date",
    ),
    "sp_toggle_story_completion": ("p_story_id", "p_user_id"),
    "sp_get_user_stories_by_year": ("p_user_id", "p_year"),
    "sp_get_user_year_stats": ("p_user_id", "p_year"),
}


def call_procedure(conn: Connection, name: str, params: dict[str, Any]):
    """Invoke procedure ``name`` with every declared parameter bound by name.

    Optional inputs must be passed explicitly as None.
    """
    proc = PROCEDURES.get(name)
    if proc is None:
        raise UnknownProcedureError(f"unknown procedure: {name}")
    expected = SIGNATURES[name]
    if set(params) != set(expected):
        missing = [p for p in expected if p not in params]
        extra = sorted(p for p in params if p not in expected)
        raise ProcedureSignatureError(f"{name}: missing={missing} unexpected={extra}")
    logger.debug("call %s(%s)", name, ", ".join(expected))
    return proc(conn, *(params[p] for p in expected))
