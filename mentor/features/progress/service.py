from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mentor.common.deps import CurrentUser
from mentor.common.errors import ValidationFailed
from mentor.common.utils import utcnow
from mentor.features.challenges.repository import ChallengeRepository, challenge_repository
from mentor.features.progress.achievements import evaluate_achievements
from mentor.features.progress.aggregation import aggregate_progress, completed_by_category
from mentor.features.progress.repository import ProgressRepository, progress_repository
from mentor.features.reviews.repository import ReviewsRepository, reviews_repository
from mentor.features.submissions.repository import SubmissionsRepository, submissions_repository

logger = logging.getLogger("mentor.progress")

DEFAULT_WEEKLY_GOAL = 3
MIN_WEEKLY_GOAL = 1
MAX_WEEKLY_GOAL = 20


class ProgressService:
    def __init__(
        self,
        repository: ProgressRepository = progress_repository,
        submissions: SubmissionsRepository = submissions_repository,
        reviews: ReviewsRepository = reviews_repository,
        challenges: ChallengeRepository = challenge_repository,
    ) -> None:
        self.repository = repository
        self.submissions = submissions
        self.reviews = reviews
        self.challenges = challenges

    async def refresh(self, user: CurrentUser) -> Dict[str, Any]:
        """Recompute the user's progress from history and persist it."""
        submissions = await self.submissions.list_by_user(user.id)
        reviews = await self.reviews.list_by_user(user.id)
        challenges = await self.challenges.list_by_ids([s.get("challenge_id") for s in submissions])

        stats = aggregate_progress(submissions, reviews, challenges)
        existing = await self.repository.get(user.id)
        now = utcnow()
        achievements = evaluate_achievements(
            stats,
            reviews,
            completed_by_category(submissions, challenges),
            (existing or {}).get("achievements") or [],
            now=now,
        )

        record: Dict[str, Any] = {
            "user_id": user.id,
            "user_email": user.email,
            "user_name": user.display_name,
            **stats.as_record(),
            "achievements": achievements,
            "last_active": now.isoformat(),
        }
        if existing is None:
            record["weekly_goal"] = DEFAULT_WEEKLY_GOAL
            record["joined_at"] = now.isoformat()
        stored = await self.repository.upsert(record)
        unlocked = len(achievements) - len((existing or {}).get("achievements") or [])
        logger.info(
            "progress_refreshed user_id=%s completed=%s average=%.2f new_achievements=%s",
            user.id,
            stats.completed_challenges,
            stats.average_score,
            unlocked,
        )
        return {**(existing or {}), **stored}

    async def set_weekly_goal(self, user: CurrentUser, goal: Optional[Any]) -> Dict[str, Any]:
        if isinstance(goal, bool) or not isinstance(goal, int) or not MIN_WEEKLY_GOAL <= goal <= MAX_WEEKLY_GOAL:
            raise ValidationFailed("Invalid weekly goal (1-20)")
        existing = await self.repository.get(user.id)
        if existing is None:
            existing = await self.refresh(user)
        updated = await self.repository.update(user.id, {"weekly_goal": goal})
        logger.info("weekly_goal_set user_id=%s goal=%s", user.id, goal)
        return {**existing, **(updated or {}), "weekly_goal": goal}


progress_service = ProgressService()

__all__ = ["DEFAULT_WEEKLY_GOAL", "ProgressService", "progress_service"]
