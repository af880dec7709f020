from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db import load_db_config
from ..logs import LogContext
from ..models import CreateStoryDto, CreateStoryRequest, CreateUserDto, StoryDto, YearStatsDto
from ..services.stored_procedure_svc import StoredProcedureService

router = APIRouter(prefix="/api/stories")
logger = logging.getLogger(__name__)


def get_sp_service() -> StoredProcedureService:
    return StoredProcedureService(load_db_config())


def _record(log: LogContext, result: str, err: str | None = None) -> None:
    # audit failures never change the response of an operation that already ran
    try:
        log.write(result, err)
    except Exception as log_err:
        logger.warning("operation_log write failed for %s: %s", log.action, log_err)


def _fail(log: LogContext, e: Exception) -> HTTPException:
    # every failure kind is reported to the client as 400 with the raw text
    _record(log, "ERROR", str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=int)
def api_create_story(body: CreateStoryRequest, svc: StoredProcedureService = Depends(get_sp_service)):
    log = LogContext("CREATE_STORY", config=svc.config)
    log.set_payload(body.model_dump(mode="json"))
    try:
        dto = CreateStoryDto(**body.model_dump(exclude={"user_id"}))
        story_id = svc.create_story(body.user_id, dto)
    except Exception as e:
        raise _fail(log, e)
    log.set_entity("STORY", str(story_id))
    _record(log, "OK")
    return story_id


@router.patch("/{story_id}/toggle", response_model=bool)
def api_toggle_story(
    story_id: int,
    user_id: Optional[uuid.UUID] = Query(None, alias="userId"),
    svc: StoredProcedureService = Depends(get_sp_service),
):
    log = LogContext("TOGGLE_STORY", config=svc.config)
    log.set_entity("STORY", str(story_id))
    log.set_payload({"story_id": story_id, "user_id": user_id})
    try:
        completed = svc.toggle_story_completion(story_id, user_id)
    except Exception as e:
        raise _fail(log, e)
    log.set_before({"is_completed": not completed})
    log.set_after({"is_completed": completed})
    _record(log, "OK")
    return completed


@router.get("/user/{user_id}/year/{year}", response_model=List[StoryDto])
def api_user_stories_by_year(user_id: uuid.UUID, year: int, svc: StoredProcedureService = Depends(get_sp_service)):
    log = LogContext("LIST_STORIES", config=svc.config)
    log.set_payload({"user_id": user_id, "year": year})
    try:
        stories = svc.get_user_stories_by_year(user_id, year)
    except Exception as e:
        raise _fail(log, e)
    log.set_after({"count": len(stories)})
    _record(log, "OK")
    return stories


@router.get("/user/{user_id}/year/{year}/stats", response_model=YearStatsDto)
def api_user_year_stats(user_id: uuid.UUID, year: int, svc: StoredProcedureService = Depends(get_sp_service)):
    log = LogContext("YEAR_STATS", config=svc.config)
    log.set_payload({"user_id": user_id, "year": year})
    try:
        stats = svc.get_user_year_stats(user_id, year)
    except Exception as e:
        raise _fail(log, e)
    log.set_after(stats.model_dump(mode="json"))
    _record(log, "OK")
    return stats


@router.post("/user", response_model=uuid.UUID)
def api_create_user(body: CreateUserDto, svc: StoredProcedureService = Depends(get_sp_service)):
    log = LogContext("CREATE_USER", config=svc.config)
    log.set_payload(body.model_dump(mode="json"))
    try:
        user_id = svc.create_user(body)
    except Exception as e:
        raise _fail(log, e)
    log.set_entity("USER", str(user_id))
    _record(log, "OK")
    return user_id
