from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends

from mentor.common.deps import CurrentUser, get_current_user
from mentor.common.errors import MentorError, to_http
from mentor.features.progress.schemas import ProgressResponse, WeeklyGoalRequest, progress_from_row
from mentor.features.progress.service import progress_service

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("", response_model=ProgressResponse, response_model_by_alias=True, summary="Recompute and return the caller's progress")
async def get_progress(current_user: CurrentUser = Depends(get_current_user)):
    row = await progress_service.refresh(current_user)
    return ProgressResponse(progress=progress_from_row(row))


@router.post("", response_model=ProgressResponse, response_model_by_alias=True, summary="Set the caller's weekly goal")
async def set_weekly_goal(
    payload: Optional[WeeklyGoalRequest] = Body(default=None),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        row = await progress_service.set_weekly_goal(current_user, payload.weekly_goal if payload else None)
    except MentorError as exc:
        raise to_http(exc)
    return ProgressResponse(progress=progress_from_row(row))


__all__ = ["router"]
