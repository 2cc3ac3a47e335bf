from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from mentor.common.deps import CurrentUser, get_current_user
from mentor.common.errors import MentorError, ReviewNotReady, ValidationFailed, to_http
from mentor.features.reviews.schemas import ReviewCodeRequest, review_to_api
from mentor.features.reviews.service import review_service

logger = logging.getLogger("reviews.endpoints")

router = APIRouter(tags=["reviews"])


@router.post("/review-code", summary="Produce (or return) the review for a submission")
async def review_code(payload: Optional[ReviewCodeRequest] = Body(default=None)) -> Dict[str, Any]:
    submission_id = payload.submission_id if payload else None
    try:
        if not submission_id:
            raise ValidationFailed("Missing submissionId")
        outcome = await review_service.review_submission(submission_id)
    except ReviewNotReady as exc:
        return {"success": False, "status": "processing", "message": exc.message}
    except MentorError as exc:
        raise to_http(exc)
    return {
        "success": True,
        "message": "Code review completed successfully" if outcome.created else "Code already reviewed",
        "review": review_to_api(outcome.review),
    }


@router.get("/reviews", summary="List the caller's reviews, newest first")
async def list_reviews(
    limit: int = Query(10, ge=1, le=50),
    offset: int = Query(0, ge=0),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[str, Any]:
    page = await review_service.list_reviews(current_user.id, limit=limit, offset=offset)
    reviews = []
    for item in page["items"]:
        entry = review_to_api(item["review"]) or {}
        entry["challenge"] = item["challenge"]
        entry["submission"] = item["submission"]
        reviews.append(entry)
    return {"success": True, "reviews": reviews, "pagination": page["pagination"]}


__all__ = ["router"]
