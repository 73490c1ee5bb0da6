"""FastAPI application for the real-estate CRM back office."""
from __future__ import annotations

import base64
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .core.config import settings
from .core.logging import configure_logging
from .routers import board, leads, notifications, statuses

configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="ImobFlow CRM API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(statuses.router, prefix="/api/statuses", tags=["statuses"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(board.router, prefix="/api/board", tags=["board"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])

FAVICON_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGMAAQAABQABDQottAAAAABJRU5ErkJggg=="
)

logger.info("CRM API configured for %s", settings.app_env)


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


@app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    """Keep crawlers out of the back office."""

    return PlainTextResponse("User-agent: *\nDisallow: /api/")


@app.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    """Return a tiny placeholder favicon."""

    return Response(content=FAVICON_BYTES, media_type="image/png")
