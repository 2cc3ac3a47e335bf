from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewCodeRequest(CamelModel):
    submission_id: Optional[str] = None


class Feedback(CamelModel):
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    bugs: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class CodeQuality(CamelModel):
    readability: int = 0
    structure: int = 0
    efficiency: int = 0
    best_practices: int = 0


class LearningResource(CamelModel):
    title: str
    url: str
    type: str = "article"


class CodeReview(CamelModel):
    id: str
    submission_id: str
    user_id: str
    challenge_id: str
    overall_score: int
    feedback: Feedback
    code_quality: CodeQuality
    career_tips: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)
    resources: List[LearningResource] = Field(default_factory=list)
    reviewed_at: datetime
    ai_model: str
    review_version: int = 1


def review_to_api(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not row:
        return None
    review = CodeReview(
        id=str(row["id"]),
        submission_id=str(row.get("submission_id")),
        user_id=str(row.get("user_id")),
        challenge_id=str(row.get("challenge_id")),
        overall_score=int(row.get("overall_score") or 0),
        feedback=Feedback(**(row.get("feedback") or {})),
        code_quality=CodeQuality(**(row.get("code_quality") or {})),
        career_tips=row.get("career_tips") or [],
        next_steps=row.get("next_steps") or [],
        resources=[LearningResource(**r) for r in row.get("resources") or []],
        reviewed_at=row.get("reviewed_at"),
        ai_model=row.get("ai_model") or "",
        review_version=int(row.get("review_version") or 1),
    )
    return review.model_dump(by_alias=True, mode="json")
