from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from mentor.common.deps import CurrentUser, get_optional_user
from mentor.common.errors import MentorError, to_http
from mentor.core.config import get_settings
from mentor.features.reviews.schemas import review_to_api
from mentor.features.reviews.service import review_service
from mentor.features.submissions.schemas import (
    PollingHints,
    ReviewStatusResponse,
    SubmissionSummary,
    SubmitCodeRequest,
    SubmitCodeResponse,
)
from mentor.features.submissions.service import submission_service

logger = logging.getLogger("submissions.endpoints")

router = APIRouter(tags=["submissions"])


@router.post(
    "/submit-code",
    status_code=status.HTTP_201_CREATED,
    response_model=SubmitCodeResponse,
    response_model_by_alias=True,
    summary="Submit code for a challenge and queue its review",
)
async def submit_code(
    payload: Optional[SubmitCodeRequest] = Body(default=None),
    current_user: CurrentUser = Depends(get_optional_user),
):
    try:
        submission = await submission_service.submit(payload or SubmitCodeRequest(), current_user)
    except MentorError as exc:
        raise to_http(exc)
    settings = get_settings()
    return SubmitCodeResponse(
        message="Code submitted successfully! Your review will be ready in a few minutes.",
        submission=SubmissionSummary(
            id=str(submission["id"]),
            challenge_id=str(submission["challenge_id"]),
            submitted_at=submission["submitted_at"],
            is_reviewed=bool(submission.get("is_reviewed")),
            language=submission["language"],
            submission_method=submission["submission_method"],
        ),
        polling=PollingHints(
            initial_delay_seconds=settings.review_poll_initial_delay_s,
            interval_seconds=settings.review_poll_interval_s,
            max_attempts=settings.review_poll_max_attempts,
        ),
    )


@router.get(
    "/submissions/{submission_id}/review-status",
    response_model=ReviewStatusResponse,
    response_model_by_alias=True,
    summary="Poll the review state of a submission",
)
async def get_review_status(submission_id: str):
    try:
        state = await review_service.review_status(submission_id)
    except MentorError as exc:
        raise to_http(exc)
    return ReviewStatusResponse(
        submission_id=state["submission_id"],
        status=state["status"],
        is_reviewed=state["is_reviewed"],
        attempts=state["attempts"],
        last_error=state["last_error"],
        review=review_to_api(state["review"]),
    )


__all__ = ["router"]
