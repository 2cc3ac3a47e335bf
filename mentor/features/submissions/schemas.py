from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitCodeRequest(CamelModel):
    # Untyped so missing or mistyped fields surface as a 400 with a message
    challenge_id: Optional[Any] = None
    code: Optional[Any] = None
    language: Optional[Any] = None
    submission_method: Optional[Any] = None
    github_url: Optional[Any] = None
    pastebin_url: Optional[Any] = None
    notes: Optional[Any] = None


class SubmissionSummary(CamelModel):
    id: str
    challenge_id: str
    submitted_at: datetime
    is_reviewed: bool = False
    language: str
    submission_method: str


class PollingHints(CamelModel):
    initial_delay_seconds: int
    interval_seconds: int
    max_attempts: int


class SubmitCodeResponse(CamelModel):
    success: bool = True
    message: str
    submission: SubmissionSummary
    polling: PollingHints


class ReviewStatusResponse(CamelModel):
    success: bool = True
    submission_id: str
    status: str
    is_reviewed: bool
    attempts: int = 0
    last_error: Optional[str] = None
    review: Optional[Dict[str, Any]] = None
