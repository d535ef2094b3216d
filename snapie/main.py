"""
Snapie — Main FastAPI Application

IPFS video resolution API for the 3Speak player.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from snapie.core.config import get_settings
from snapie.core.database import video_db
from snapie.core.errors import SnapieError

settings = get_settings()

# ── Logging ──────────────────────────────────────────────────────────────

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level)
    ),
)

logger = structlog.get_logger()


# ── Lifespan ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown hooks."""
    logger.info("Starting Snapie", version=settings.app_version, gateways=settings.ipfs_gateways)
    await video_db.connect()

    missing = [
        name for name in ("processing", "failed", "deleted")
        if not getattr(settings, f"placeholder_{name}_cid")
    ]
    if missing:
        logger.warning("Placeholders not configured", categories=missing)

    yield

    await video_db.close()
    logger.info("Shutting down Snapie")


# ── App ──────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Snapie",
    description="Resolves owner/permlink to multi-gateway IPFS video sources",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


# ── Error Handlers ───────────────────────────────────────────────────────

@app.exception_handler(SnapieError)
async def snapie_error_handler(request: Request, exc: SnapieError):
    logger.info(
        "Request failed",
        path=request.url.path,
        error=type(exc).__name__,
        message=exc.message,
        status=exc.raw_status,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Invalid request body", path=request.url.path)
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ── Routes ───────────────────────────────────────────────────────────────

from snapie.api.routes import videos

app.include_router(videos.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "endpoints": [
            f"{settings.api_prefix}/watch?v=owner/permlink",
            f"{settings.api_prefix}/embed?v=owner/permlink",
            f"{settings.api_prefix}/view",
        ],
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "database": await video_db.health_check()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
