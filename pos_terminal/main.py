"""FastAPI entrypoint for the POS terminal order engine."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pos_terminal.api.v1.api import api_router
from pos_terminal.core.config import settings
from pos_terminal.db import session as db_session
from pos_terminal.db.base import Base
from pos_terminal.db.migrations import ensure_sqlite_schema
from pos_terminal.db.seed import ensure_seed_data
from pos_terminal.services.errors import AuthenticationError

logger = logging.getLogger(__name__)

app = FastAPI(title="POS Terminal Order Engine", debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(AuthenticationError)
def session_invalid_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.info("[AUTH] session invalid on %s: %s", request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.as_dict(), "session_invalid": True},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.on_event("startup")
def startup() -> None:
    engine = db_session.engine
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema(engine)
    with db_session.SessionLocal() as session:
        try:
            ensure_seed_data(session)
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}
