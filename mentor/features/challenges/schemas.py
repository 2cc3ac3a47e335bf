from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChallengeCreateRequest(CamelModel):
    # Loosely typed so a null or non-string enum is rejected by the service with a 400
    difficulty: Optional[Any] = "beginner"
    category: Optional[Any] = "react"
    user_id: Optional[str] = None


class Challenge(CamelModel):
    id: str
    title: str
    description: str
    difficulty: str
    category: str
    requirements: List[str] = Field(default_factory=list)
    hints: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    estimated_time: int
    example_code: Optional[str] = None
    created_at: datetime


class ChallengeResponse(CamelModel):
    success: bool = True
    challenge: Challenge
