"""
存储过程调用服务 - 应用层与数据库之间唯一的数据访问入口

每个方法：打开一个独立连接 -> 按名绑定参数（可选值显式传 None）
-> 调用一个过程 -> 将标量/结果集映射为 DTO。
不做重试、不吞异常：约束冲突、连接失败、类型转换失败都原样抛给调用方。
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime

from ..db import DbConfig, get_conn
from ..domain.stats import round_hours
from ..models import CreateStoryDto, CreateUserDto, StoryDto, YearStatsDto
from ..repository.procedures import call_procedure

logger = logging.getLogger(__name__)


def _parse_ts(v: str | None) -> datetime | None:
    return None if v is None else datetime.fromisoformat(v)


def _story_from_row(row) -> StoryDto:
    return StoryDto(
        id=int(row["id"]),
        user_id=uuid.UUID(row["user_id"]),
        title=row["title"],
        description=row["description"],
        year=int(row["year"]),
        is_completed=bool(row["is_completed"]),
        priority=int(row["priority"]),
        estimated_hours=None if row["estimated_hours"] is None else round_hours(row["estimated_hours"]),
        actual_hours=None if row["actual_hours"] is None else round_hours(row["actual_hours"]),
        due_date=_parse_ts(row["due_date"]),
        completed_at=_parse_ts(row["completed_at"]),
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


class StoredProcedureService:
    """Thin adapter over the procedures in ``repository.procedures``."""

    def __init__(self, config: DbConfig):
        self.config = config

    def create_user(self, dto: CreateUserDto) -> uuid.UUID:
        with get_conn(self.config) as conn:
            user_id = call_procedure(
                conn,
                "sp_create_user",
                {"p_email": str(dto.email), "p_display_name": dto.display_name},
            )
        logger.info("created user %s", user_id)
        return uuid.UUID(user_id)

    def create_story(self, user_id: uuid.UUID, dto: CreateStoryDto) -> int:
        params = {
            "p_user_id": str(user_id),
            "p_title": dto.title,
            "p_description": dto.description,
            "p_year": dto.year,
            "p_priority": int(dto.priority),
            "p_estimated_hours": dto.estimated_hours,
            "p_due_date": dto.due_date.isoformat() if dto.due_date is not None else None,
        }
        with get_conn(self.config) as conn:
            story_id = call_procedure(conn, "sp_create_story", params)
        logger.info("created story %s for user %s", story_id, user_id)
        return int(story_id)

    def toggle_story_completion(self, story_id: int, user_id: uuid.UUID | None = None) -> bool:
        params = {
            "p_story_id": story_id,
            "p_user_id": str(user_id) if user_id is not None else None,
        }
        with get_conn(self.config) as conn:
            result = call_procedure(conn, "sp_toggle_story_completion", params)
        return bool(result)

    def get_user_stories_by_year(self, user_id: uuid.UUID, year: int) -> list[StoryDto]:
        with get_conn(self.config) as conn:
            rows = call_procedure(
                conn,
                "sp_get_user_stories_by_year",
                {"p_user_id": str(user_id), "p_year": year},
            )
        return [_story_from_row(r) for r in rows]

    def get_user_year_stats(self, user_id: uuid.UUID, year: int) -> YearStatsDto:
        with get_conn(self.config) as conn:
            row = call_procedure(
                conn,
                "sp_get_user_year_stats",
                {"p_user_id": str(user_id), "p_year": year},
            )
        return YearStatsDto(**row)
