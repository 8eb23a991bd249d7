from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.db import dispose_engine
from backend.db_init import init_db
from backend.routes import calendar, finance, folders, mood, notes, profile, tasks, weather, widgets

logger = logging.getLogger("backend")

ROUTE_MODULES = (tasks, mood, finance, folders, notes, calendar, profile, widgets, weather)


def first_validation_message(exc: RequestValidationError) -> str:
    """Collapse pydantic's error list into the single message clients show."""
    for error in exc.errors():
        field_path = ".".join(str(part) for part in error.get("loc", ()) if part not in {"body", "query", "path"})
        message = error.get("msg") or "Invalid value"
        return f"{field_path}: {message}" if field_path else message
    return "Invalid request"


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("BACKEND_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = FastAPI(title="LifeHub API", version="0.1.0")
    for module in ROUTE_MODULES:
        app.include_router(module.router)

    @app.on_event("startup")
    async def _prepare_schema():
        await init_db()
        logger.info("Schema ready, %d route modules mounted", len(ROUTE_MODULES))

    @app.on_event("shutdown")
    async def _close_pool():
        await dispose_engine()

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        message = first_validation_message(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"detail": message})

    @app.exception_handler(Exception)
    async def _server_error(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    async def health():
        return {"ok": True}

    return app


app = create_app()
