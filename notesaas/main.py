"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notesaas.api.v1 import v1_router
from notesaas.core.config import get_settings
from notesaas.core.database import async_session_factory, close_db, init_db
from notesaas.core.errors import AuthError, NotesError, status_for
from notesaas.core.logging import setup_logging
from notesaas.services.accounts import seed_demo_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    await init_db()
    if get_settings().seed_on_startup:
        async with async_session_factory() as session:
            await seed_demo_data(session)
    yield
    await close_db()


app = FastAPI(
    title="Notes SaaS",
    version="0.1.0",
    description="Multi-tenant notes API with per-tenant subscription limits",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────
_settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _settings.allowed_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error mapping ────────────────────────────────────────────

@app.exception_handler(NotesError)
async def handle_notes_error(request: Request, exc: NotesError) -> JSONResponse:
    status_code = status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    if status_code >= 500:
        logger.error("%s on %s %s", exc.code, request.method, request.url.path)
    return JSONResponse(status_code=status_code, content=exc.to_body(), headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "field": ".".join(
                str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")
            ),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"detail": "Validation failed", "error": "validation_error", "fields": fields},
    )


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal_error"},
    )


# ── API routes ───────────────────────────────────────────────
app.include_router(v1_router)


@app.get("/health", tags=["system"])
async def health_check() -> dict:
    return {"status": "ok"}
