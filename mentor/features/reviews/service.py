from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from jsonschema import ValidationError, validate

from mentor.adapters.llm_client import (
    ProviderError,
    ProviderUnavailable,
    TextGenerator,
    build_text_generator,
)
from mentor.common.errors import NotFound, ReviewNotReady
from mentor.common.utils import describe_error, ensure_str_list, extract_json_object, round_half_up
from mentor.core.config import get_settings
from mentor.features.challenges.repository import ChallengeRepository, challenge_repository
from mentor.features.reviews.heuristics import REVIEW_VERSION, score_submission
from mentor.features.reviews.repository import ReviewsRepository, reviews_repository
from mentor.features.submissions.repository import (
    REVIEW_COMPLETED,
    REVIEW_PENDING,
    SubmissionsRepository,
    submissions_repository,
)

logger = logging.getLogger("mentor.reviews")

SYSTEM_PROMPT = (
    "You are a senior software engineer mentoring junior developers. "
    "Review their code honestly and constructively, and point out what would matter to a hiring manager."
)

RESOURCE_TYPES = ["article", "video", "tutorial", "documentation"]

_STR_LIST = {"type": "array", "items": {"type": "string"}}
_SCORE = {"type": "number"}

REVIEW_SCHEMA = {
    "type": "object",
    "required": ["overallScore", "feedback", "codeQuality", "careerTips", "nextSteps", "resources"],
    "properties": {
        "overallScore": _SCORE,
        "feedback": {
            "type": "object",
            "required": ["strengths", "improvements", "bugs", "suggestions"],
            "properties": {
                "strengths": _STR_LIST,
                "improvements": _STR_LIST,
                "bugs": _STR_LIST,
                "suggestions": _STR_LIST,
            },
        },
        "codeQuality": {
            "type": "object",
            "required": ["readability", "structure", "efficiency", "bestPractices"],
            "properties": {
                "readability": _SCORE,
                "structure": _SCORE,
                "efficiency": _SCORE,
                "bestPractices": _SCORE,
            },
        },
        "careerTips": _STR_LIST,
        "nextSteps": _STR_LIST,
        "resources": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["title", "url", "type"],
                "properties": {
                    "title": {"type": "string"},
                    "url": {"type": "string"},
                    "type": {"type": "string", "enum": RESOURCE_TYPES},
                },
            },
        },
    },
    "additionalProperties": True,
}


def build_review_prompt(challenge: Dict[str, Any], language: str, code: str) -> str:
    requirements = "\n".join(f"- {req}" for req in challenge.get("requirements") or [])
    return f"""Review the following {language} submission for a {challenge.get("difficulty")} coding challenge.

Challenge: {challenge.get("title")}
Description: {challenge.get("description")}
Requirements:
{requirements}

Submitted code:
```
{code}
```

Respond with JSON only, using this structure:
{{
  "overallScore": 7,
  "feedback": {{
    "strengths": ["..."],
    "improvements": ["..."],
    "bugs": ["..."],
    "suggestions": ["..."]
  }},
  "codeQuality": {{"readability": 7, "structure": 7, "efficiency": 7, "bestPractices": 7}},
  "careerTips": ["..."],
  "nextSteps": ["..."],
  "resources": [{{"title": "...", "url": "https://...", "type": "article|video|tutorial|documentation"}}]
}}

All scores are integers from 0 to 10."""


def clamp_score(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    return round_half_up(min(max(number, 0.0), 10.0))


def _require_finite_scores(payload: Dict[str, Any]) -> None:
    quality = payload.get("codeQuality") or {}
    scores = [payload.get("overallScore")]
    scores += [quality.get(key) for key in ("readability", "structure", "efficiency", "bestPractices")]
    for score in scores:
        if isinstance(score, float) and not math.isfinite(score):
            raise ValueError(f"non-finite score in generated review: {score}")


def normalise_generated_review(payload: Dict[str, Any], model: str) -> Dict[str, Any]:
    _require_finite_scores(payload)
    feedback = payload.get("feedback") or {}
    quality = payload.get("codeQuality") or {}
    return {
        "overall_score": clamp_score(payload.get("overallScore")),
        "feedback": {key: ensure_str_list(feedback.get(key)) for key in ("strengths", "improvements", "bugs", "suggestions")},
        "code_quality": {
            "readability": clamp_score(quality.get("readability")),
            "structure": clamp_score(quality.get("structure")),
            "efficiency": clamp_score(quality.get("efficiency")),
            "best_practices": clamp_score(quality.get("bestPractices")),
        },
        "career_tips": ensure_str_list(payload.get("careerTips")),
        "next_steps": ensure_str_list(payload.get("nextSteps")),
        "resources": [
            {"title": str(r["title"]).strip(), "url": str(r["url"]).strip(), "type": r["type"]}
            for r in payload.get("resources") or []
        ],
        "ai_model": model,
        "review_version": REVIEW_VERSION,
    }


@dataclass
class ReviewOutcome:
    review: Dict[str, Any]
    created: bool


class ReviewService:
    def __init__(
        self,
        generator: TextGenerator,
        *,
        submissions: SubmissionsRepository = submissions_repository,
        reviews: ReviewsRepository = reviews_repository,
        challenges: ChallengeRepository = challenge_repository,
    ) -> None:
        self.generator = generator
        self.submissions = submissions
        self.reviews = reviews
        self.challenges = challenges

    async def generate_review(self, challenge: Dict[str, Any], language: str, code: str) -> Dict[str, Any]:
        """Provider review if one answers with a valid payload, heuristic review otherwise."""
        difficulty = challenge.get("difficulty") or ""
        prompt = build_review_prompt(challenge, language, code)
        try:
            raw = await self.generator.complete(SYSTEM_PROMPT, prompt, max_tokens=2000, temperature=0.3)
            payload = extract_json_object(raw)
            validate(instance=payload, schema=REVIEW_SCHEMA)
            return normalise_generated_review(payload, self.generator.model)
        except ProviderUnavailable:
            logger.info("review_fallback reason=provider_unconfigured")
        except (ProviderError, ValidationError, ValueError, TypeError) as exc:
            logger.warning("review_fallback reason=%s error=%s", type(exc).__name__, exc)
        return score_submission(difficulty, code)

    async def review_submission(self, submission_id: str) -> ReviewOutcome:
        submission = await self.submissions.get(submission_id)
        if not submission:
            raise NotFound("Submission not found")

        if submission.get("is_reviewed"):
            existing = await self.reviews.get_by_submission(submission_id)
            if existing:
                return ReviewOutcome(existing, False)

        challenge = await self.challenges.get(submission["challenge_id"])
        if not challenge:
            raise NotFound("Challenge not found")

        claimed = await self.submissions.claim_for_review(submission_id)
        if not claimed:
            existing = await self.reviews.get_by_submission(submission_id)
            if existing:
                return ReviewOutcome(existing, False)
            # completed without a stored review: the row is inconsistent, so review it again
            claimed = await self.submissions.claim_for_review(submission_id, [REVIEW_COMPLETED])
            if claimed:
                logger.warning("review_missing_for_completed_submission submission_id=%s reclaimed", submission_id)
        if not claimed:
            raise ReviewNotReady("Review is being generated, check back shortly")

        try:
            data = await self.generate_review(challenge, submission.get("language") or "", submission.get("code") or "")
            data.update({
                "submission_id": submission_id,
                "user_id": submission.get("user_id"),
                "challenge_id": submission.get("challenge_id"),
            })
            review, created = await self.reviews.create(data)
            await self.submissions.mark_reviewed(submission_id, str(review["id"]))
        except Exception as exc:
            attempts = int(claimed.get("review_attempts") or 0) + 1
            await self.submissions.mark_failed(submission_id, describe_error(exc), attempts)
            raise
        logger.info(
            "review_stored submission_id=%s review_id=%s score=%s model=%s created=%s",
            submission_id,
            review.get("id"),
            review.get("overall_score"),
            review.get("ai_model"),
            created,
        )
        return ReviewOutcome(review, created)

    async def review_status(self, submission_id: str) -> Dict[str, Any]:
        submission = await self.submissions.get(submission_id)
        if not submission:
            raise NotFound("Submission not found")
        review = await self.reviews.get_by_submission(submission_id)
        status = submission.get("review_status") or REVIEW_PENDING
        if review is not None:
            status = REVIEW_COMPLETED
        return {
            "submission_id": str(submission["id"]),
            "status": status,
            "is_reviewed": bool(submission.get("is_reviewed")) or review is not None,
            "attempts": int(submission.get("review_attempts") or 0),
            "last_error": submission.get("last_error"),
            "review": review,
        }

    async def list_reviews(self, user_id: str, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        limit = max(1, min(int(limit), 50))
        offset = max(0, int(offset))
        rows, total = await self.reviews.page_by_user(user_id, limit, offset)
        challenges = {
            str(c["id"]): c for c in await self.challenges.list_by_ids([r.get("challenge_id") for r in rows])
        }
        submissions = {
            str(s["id"]): s for s in await self.submissions.list_by_ids([r.get("submission_id") for r in rows])
        }
        enriched: List[Dict[str, Any]] = []
        for row in rows:
            challenge: Optional[Dict[str, Any]] = challenges.get(str(row.get("challenge_id")))
            submission: Optional[Dict[str, Any]] = submissions.get(str(row.get("submission_id")))
            enriched.append({
                "review": row,
                "challenge": {
                    "id": challenge["id"],
                    "title": challenge.get("title"),
                    "difficulty": challenge.get("difficulty"),
                    "category": challenge.get("category"),
                    "technologies": challenge.get("technologies") or [],
                } if challenge else None,
                "submission": {
                    "id": submission["id"],
                    "language": submission.get("language"),
                    "submissionMethod": submission.get("submission_method"),
                    "submittedAt": submission.get("submitted_at"),
                } if submission else None,
            })
        return {"items": enriched, "pagination": {"limit": limit, "offset": offset, "total": total}}


def build_review_service() -> ReviewService:
    settings = get_settings()
    return ReviewService(build_text_generator(settings.review_api_key, settings.review_model, settings))


review_service = build_review_service()

__all__ = [
    "REVIEW_SCHEMA",
    "ReviewOutcome",
    "ReviewService",
    "build_review_prompt",
    "clamp_score",
    "normalise_generated_review",
    "review_service",
]
