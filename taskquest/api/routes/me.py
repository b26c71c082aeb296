"""
taskquest.api.routes.me — The signed-in user's completions, profile & badges
=============================================================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from taskquest.api.deps import get_service
from taskquest.services.gamification_service import GamificationService

router = APIRouter(prefix="/me", tags=["me"])


class CompletionIn(BaseModel):
    completed_at: datetime
    total_tasks_today: int = Field(0, ge=0)


@router.post("/completions", status_code=status.HTTP_202_ACCEPTED)
async def post_completion(
    body: CompletionIn,
    service: GamificationService = Depends(get_service),
):
    """Record a completed task.  Failures are absorbed; the response is
    always 202 once the caller is authenticated."""
    await service.on_task_completed(body.completed_at, body.total_tasks_today)
    return {"status": "accepted"}


@router.get("/profile")
async def get_profile(service: GamificationService = Depends(get_service)):
    profile = await service.fetch_profile()
    return profile.to_dict()


@router.get("/badges")
async def get_badges(service: GamificationService = Depends(get_service)):
    """Every badge, unlocked or not, in catalog order."""
    badges = await service.fetch_badges()
    return [b.to_dict() for b in badges]
