from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body

from mentor.common.errors import MentorError, to_http
from mentor.features.challenges.schemas import Challenge, ChallengeCreateRequest, ChallengeResponse
from mentor.features.challenges.service import challenge_service

logger = logging.getLogger("challenges.endpoints")

router = APIRouter(tags=["challenges"])


def challenge_from_row(row: Dict[str, Any]) -> Challenge:
    return Challenge(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        difficulty=row.get("difficulty") or "",
        category=row.get("category") or "",
        requirements=row.get("requirements") or [],
        hints=row.get("hints") or [],
        technologies=row.get("technologies") or [],
        estimated_time=int(row.get("estimated_time") or 0),
        example_code=row.get("example_code"),
        created_at=row.get("created_at"),
    )


@router.post(
    "/challenge",
    response_model=ChallengeResponse,
    response_model_by_alias=True,
    summary="Generate a coding challenge for a difficulty and category",
)
async def create_challenge(payload: Optional[ChallengeCreateRequest] = Body(default=None)):
    payload = payload or ChallengeCreateRequest()
    try:
        row = await challenge_service.create_challenge(
            payload.difficulty, payload.category, user_id=payload.user_id
        )
    except MentorError as exc:
        raise to_http(exc)
    return ChallengeResponse(challenge=challenge_from_row(row))


__all__ = ["router", "challenge_from_row"]
