"""Domain errors shared by the mentor features.

Services raise these; endpoints translate them into HTTP responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class MentorError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "E_MENTOR"

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationFailed(MentorError):
    error_code = "E_INVALID_INPUT"


class NotFound(MentorError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "E_NOT_FOUND"


class DuplicateSubmission(MentorError):
    error_code = "E_DUPLICATE_SUBMISSION"

    def __init__(self, submission_id: str) -> None:
        super().__init__(
            "You have already submitted code for this challenge",
            extra={"submission_id": submission_id},
        )
        self.submission_id = submission_id


class ReviewNotReady(MentorError):
    status_code = status.HTTP_202_ACCEPTED
    error_code = "E_REVIEW_PENDING"


def to_http(exc: MentorError) -> HTTPException:
    detail: Dict[str, Any] = {"error_code": exc.error_code, "message": exc.message}
    detail.update(exc.extra)
    return HTTPException(status_code=exc.status_code, detail=detail)
