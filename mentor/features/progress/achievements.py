from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from mentor.common.utils import utcnow
from mentor.features.progress.aggregation import ProgressStats


@dataclass(frozen=True)
class AchievementContext:
    stats: ProgressStats
    scores: List[int]
    category_completed: Dict[str, int]


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    rule: Callable[[AchievementContext], bool]

    def unlocked(self, at: datetime) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "unlocked_at": at.isoformat(),
        }


def _difficulty_done(ctx: AchievementContext, difficulty: str) -> int:
    return int(ctx.stats.difficulty_progress.get(difficulty, {}).get("completed", 0))


ACHIEVEMENTS: List[Achievement] = [
    Achievement("first_challenge", "First Steps", "Complete your first challenge", "🎯",
                lambda ctx: ctx.stats.completed_challenges >= 1),
    Achievement("streak_3", "On Fire", "Complete 3 challenges in a row", "🔥",
                lambda ctx: ctx.stats.current_streak >= 3),
    Achievement("streak_7", "Week Warrior", "Complete 7 challenges in a row", "⚡",
                lambda ctx: ctx.stats.current_streak >= 7),
    Achievement("perfect_score", "Perfect 10", "Get a perfect 10 score on a challenge", "🌟",
                lambda ctx: any(score == 10 for score in ctx.scores)),
    Achievement("beginner_master", "Beginner Master", "Complete 10 beginner challenges", "🥉",
                lambda ctx: _difficulty_done(ctx, "beginner") >= 10),
    Achievement("intermediate_master", "Intermediate Master", "Complete 10 intermediate challenges", "🥈",
                lambda ctx: _difficulty_done(ctx, "intermediate") >= 10),
    Achievement("advanced_master", "Advanced Master", "Complete 10 advanced challenges", "🥇",
                lambda ctx: _difficulty_done(ctx, "advanced") >= 10),
    Achievement("react_specialist", "React Specialist", "Complete 5 React challenges", "⚛️",
                lambda ctx: ctx.category_completed.get("react", 0) >= 5),
    Achievement("js_guru", "JavaScript Guru", "Complete 5 JavaScript challenges", "📜",
                lambda ctx: ctx.category_completed.get("javascript", 0) >= 5),
]


def evaluate_achievements(
    stats: ProgressStats,
    reviews: Iterable[Dict[str, Any]],
    category_completed: Dict[str, int],
    unlocked: Optional[List[Dict[str, Any]]] = None,
    *,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Return ``unlocked`` plus any newly earned achievements.

    Existing entries are never removed, reordered or re-stamped.
    """
    current = list(unlocked or [])
    have = {entry.get("id") for entry in current}
    ctx = AchievementContext(
        stats=stats,
        scores=[int(r.get("overall_score") or 0) for r in reviews],
        category_completed=category_completed,
    )
    at = now or utcnow()
    for achievement in ACHIEVEMENTS:
        if achievement.id not in have and achievement.rule(ctx):
            current.append(achievement.unlocked(at))
            have.add(achievement.id)
    return current


__all__ = ["ACHIEVEMENTS", "Achievement", "evaluate_achievements"]
