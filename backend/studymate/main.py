from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from studymate import __version__
from studymate.api.v1.accounts import router as accounts_router
from studymate.api.v1.dependencies import get_payment_service, get_solver_registry
from studymate.api.v1.router import router as v1_router
from studymate.core.config import get_settings
from studymate.core.errors import StudyMateError
from studymate.core.logging import configure_logging
from studymate.infra.db.session import init_db

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging(logging.INFO)
init_db()
get_payment_service().ensure_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    get_solver_registry().close_all()


app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StudyMateError)
async def studymate_error_handler(request: Request, exc: StudyMateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


app.include_router(accounts_router)
app.include_router(v1_router)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    return {"ok": "true"}
