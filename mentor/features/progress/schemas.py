from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WeeklyGoalRequest(CamelModel):
    weekly_goal: Optional[Any] = None


class DifficultyCount(CamelModel):
    completed: int = 0
    total: int = 0


class UnlockedAchievement(CamelModel):
    id: str
    title: str
    description: str
    icon: str
    unlocked_at: datetime


class MonthlyStat(CamelModel):
    month: str
    challenges_completed: int
    average_score: float
    top_skill: str


class MentorProgress(CamelModel):
    user_id: str
    user_email: str = ""
    user_name: str = ""
    total_challenges: int = 0
    completed_challenges: int = 0
    average_score: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    last_challenge_date: Optional[datetime] = None
    skill_scores: Dict[str, float] = Field(default_factory=dict)
    difficulty_progress: Dict[str, DifficultyCount] = Field(default_factory=dict)
    achievements: List[UnlockedAchievement] = Field(default_factory=list)
    weekly_goal: int = 3
    monthly_stats: List[MonthlyStat] = Field(default_factory=list)
    joined_at: Optional[datetime] = None
    last_active: Optional[datetime] = None


class ProgressResponse(CamelModel):
    success: bool = True
    progress: MentorProgress


def progress_from_row(row: Dict[str, Any]) -> MentorProgress:
    fields = MentorProgress.model_fields
    return MentorProgress.model_validate({k: v for k, v in row.items() if k in fields and v is not None})
