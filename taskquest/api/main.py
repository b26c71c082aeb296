"""
taskquest.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn taskquest.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from taskquest.api.deps import get_config, get_engine  # noqa: E402
from taskquest.api.routes.diagnostics import router as diagnostics_router  # noqa: E402
from taskquest.api.routes.me import router as me_router  # noqa: E402
from taskquest.services.log_buffer import install_handler  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Allowed CORS origins from ``CORS_ALLOW_ORIGINS`` (comma-separated)."""
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — capture logs and warm the DB engine."""
    install_handler()

    cfg = get_config()
    engine = get_engine()
    logger.info(
        "TaskQuest API started — engine ready (%s), timezone %s",
        engine.url.database, cfg.timezone,
    )
    yield
    logger.info("TaskQuest API shutting down")


app = FastAPI(
    title="TaskQuest API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(me_router, prefix="/api")
app.include_router(diagnostics_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
