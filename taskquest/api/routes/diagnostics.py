"""
taskquest.api.routes.diagnostics — Recent log records (admin only)
===================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from taskquest.api.deps import get_current_admin
from taskquest.services.log_buffer import VALID_LEVELS, get_logs

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


@router.get("/logs")
def get_recent_logs(
    tail: int = Query(200, ge=1, le=1000),
    level: str | None = Query(None),
    logger_prefix: str | None = Query(None, alias="logger"),
    admin: dict = Depends(get_current_admin),
):
    """Return recent log entries, e.g. absorbed store failures."""
    entries = get_logs(tail=tail, level=level, logger_prefix=logger_prefix)
    return {
        "entries": entries,
        "total": len(entries),
        "valid_levels": list(VALID_LEVELS),
    }
