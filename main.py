"""Lessons - FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import create_engine, create_session_factory, init_db
from app.errors import DuplicateSubmission, NotFound, StorageFailure, ValidationError
from app.routers import lessons, teacher, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    app.state.started_at = time.monotonic()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    engine = create_engine(settings.DATABASE_URL, echo=settings.APP_DEBUG)
    await init_db(engine)
    app.state.session_factory = create_session_factory(engine)
    logger.info("Database ready at %s", settings.DATABASE_URL)
    try:
        yield
    finally:
        app.state.session_factory = None
        await engine.dispose()
        logger.info("Database engine disposed")


app = FastAPI(title="Lessons", version="0.1.0", lifespan=lifespan)
app.state.session_factory = None
app.state.started_at = time.monotonic()

# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CORS_ORIGIN],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Domain error mapping
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": exc.message, "fields": exc.field_errors},
    )


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"error": exc.message})


@app.exception_handler(DuplicateSubmission)
async def duplicate_submission_handler(request: Request, exc: DuplicateSubmission):
    return JSONResponse(status_code=409, content={"error": exc.message})


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    logger.error("%s %s: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.get("/health")
async def health():
    """Readiness check."""
    return {"ok": True, "uptime": round(time.monotonic() - app.state.started_at, 3)}


# Routers
app.include_router(users.router)
app.include_router(lessons.router)
app.include_router(teacher.router)
