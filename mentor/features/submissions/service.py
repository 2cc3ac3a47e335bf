from __future__ import annotations

import logging
from typing import Any, Dict

from mentor.common.deps import CurrentUser
from mentor.common.errors import DuplicateSubmission, NotFound, ValidationFailed
from mentor.features.challenges.repository import ChallengeRepository, challenge_repository
from mentor.features.reviews.worker import ReviewQueue, review_queue
from mentor.features.submissions.repository import SubmissionsRepository, submissions_repository
from mentor.features.submissions.schemas import SubmitCodeRequest

logger = logging.getLogger("mentor.submissions")

VALID_LANGUAGES = ("javascript", "typescript", "react", "html", "css", "other")
VALID_METHODS = ("paste", "direct", "github", "pastebin")
MAX_CODE_LENGTH = 50_000

REQUIRED_FIELDS = ("challengeId", "code", "language", "submissionMethod")


class SubmissionService:
    def __init__(
        self,
        repository: SubmissionsRepository = submissions_repository,
        challenges: ChallengeRepository = challenge_repository,
        queue: ReviewQueue = review_queue,
    ) -> None:
        self.repository = repository
        self.challenges = challenges
        self.queue = queue

    async def submit(self, payload: SubmitCodeRequest, user: CurrentUser) -> Dict[str, Any]:
        if not (payload.challenge_id and payload.code and payload.language and payload.submission_method):
            raise ValidationFailed(f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")
        mistyped = [
            name
            for name, value in (
                ("challengeId", payload.challenge_id),
                ("code", payload.code),
                ("language", payload.language),
                ("submissionMethod", payload.submission_method),
                ("githubUrl", payload.github_url),
                ("pastebinUrl", payload.pastebin_url),
                ("notes", payload.notes),
            )
            if value is not None and not isinstance(value, str)
        ]
        if mistyped:
            raise ValidationFailed(f"Fields must be strings: {', '.join(mistyped)}")

        challenge = await self.challenges.get(payload.challenge_id)
        if not challenge:
            raise NotFound("Challenge not found")

        method = payload.submission_method
        if method == "github" and not payload.github_url:
            raise ValidationFailed("GitHub URL is required for GitHub submissions")
        if method == "pastebin" and not payload.pastebin_url:
            raise ValidationFailed("Pastebin URL is required for Pastebin submissions")
        if method not in VALID_METHODS:
            raise ValidationFailed("Invalid submission method specified")
        if payload.language not in VALID_LANGUAGES:
            raise ValidationFailed("Invalid language specified")
        if len(payload.code) > MAX_CODE_LENGTH:
            raise ValidationFailed("Code submission too large (max 50KB)")

        existing = await self.repository.find_by_user_challenge(user.id, payload.challenge_id)
        if existing:
            raise DuplicateSubmission(str(existing["id"]))

        submission = await self.repository.create({
            "user_id": user.id,
            "challenge_id": payload.challenge_id,
            "code": payload.code,
            "language": payload.language,
            "submission_method": method,
            "github_url": payload.github_url or None,
            "pastebin_url": payload.pastebin_url or None,
            "notes": payload.notes or None,
            "user_email": user.email,
            "user_name": user.display_name,
        })
        logger.info(
            "submission_created id=%s user_id=%s challenge_id=%s language=%s",
            submission["id"],
            user.id,
            payload.challenge_id,
            payload.language,
        )
        self.queue.enqueue(str(submission["id"]))
        return submission


submission_service = SubmissionService()

__all__ = [
    "MAX_CODE_LENGTH",
    "SubmissionService",
    "VALID_LANGUAGES",
    "VALID_METHODS",
    "submission_service",
]
