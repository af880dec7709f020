from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..logs import search_logs
from ..services.stored_procedure_svc import StoredProcedureService
from .stories import get_sp_service

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    svc: StoredProcedureService = Depends(get_sp_service),
):
    total, items = search_logs(query, action, ts_from, ts_to, page, size, config=svc.config)
    return {"total": total, "items": items}
