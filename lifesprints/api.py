"""
FastAPI app entry point aggregating per-domain routers under lifesprints/routes.
Keep as `uvicorn lifesprints.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .services.schema_svc import ensure_db_schema

logger = logging.getLogger(__name__)

app = FastAPI(title="lifesprints-api", version=__version__)


@app.on_event("startup")
def on_startup():
    try:
        ensure_db_schema()
    except Exception as e:
        logger.warning("ensure_db_schema_failed: %s", e)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # request validation is reported like every other failure: 400 + message
    return JSONResponse(status_code=400, content={"detail": str(exc)})


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import stories as stories_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(stories_routes.router)
app.include_router(logs_routes.router)
