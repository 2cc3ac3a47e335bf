from __future__ import annotations

"""
Progress is derived from a user's history on every fetch.

Nothing here touches the store: the same submissions, reviews and challenges
always produce the same stats.
"""

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from mentor.common.utils import parse_datetime
from mentor.features.challenges.templates import CATEGORIES, DIFFICULTIES

STREAK_CAP = 10


@dataclass
class MonthlyStat:
    month: str
    challenges_completed: int
    average_score: float
    top_skill: str


@dataclass
class ProgressStats:
    total_challenges: int = 0
    completed_challenges: int = 0
    average_score: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    last_challenge_date: Optional[datetime] = None
    skill_scores: Dict[str, float] = field(default_factory=dict)
    difficulty_progress: Dict[str, Dict[str, int]] = field(default_factory=dict)
    monthly_stats: List[MonthlyStat] = field(default_factory=list)

    def as_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record["last_challenge_date"] = (
            self.last_challenge_date.isoformat() if self.last_challenge_date else None
        )
        return record


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _score(review: Dict[str, Any]) -> float:
    return float(review.get("overall_score") or 0)


def _monthly_stats(reviews: List[Dict[str, Any]], category_of: Dict[str, str]) -> List[MonthlyStat]:
    by_month: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
    for review in reviews:
        reviewed_at = parse_datetime(review.get("reviewed_at"))
        if reviewed_at is None:
            continue
        by_month[reviewed_at.strftime("%Y-%m")].append(review)

    stats: List[MonthlyStat] = []
    for month in sorted(by_month):
        month_reviews = by_month[month]
        per_skill: Dict[str, List[float]] = defaultdict(list)
        for review in month_reviews:
            category = category_of.get(str(review.get("challenge_id")))
            if category in CATEGORIES:
                per_skill[category].append(_score(review))
        top_skill = "general"
        if per_skill:
            # ties resolve in category table order
            ranked = sorted(per_skill, key=lambda c: (-_mean(per_skill[c]), CATEGORIES.index(c)))
            top_skill = ranked[0]
        stats.append(
            MonthlyStat(
                month=month,
                challenges_completed=len(month_reviews),
                average_score=_mean([_score(r) for r in month_reviews]),
                top_skill=top_skill,
            )
        )
    return stats


def completed_by_category(
    submissions: Iterable[Dict[str, Any]], challenges: Iterable[Dict[str, Any]]
) -> Dict[str, int]:
    category_of = {str(c.get("id")): c.get("category") for c in challenges}
    counts = {category: 0 for category in CATEGORIES}
    for submission in submissions:
        if not submission.get("is_reviewed"):
            continue
        category = category_of.get(str(submission.get("challenge_id")))
        if category in counts:
            counts[category] += 1
    return counts


def aggregate_progress(
    submissions: Iterable[Dict[str, Any]],
    reviews: Iterable[Dict[str, Any]],
    challenges: Iterable[Dict[str, Any]],
) -> ProgressStats:
    submissions = list(submissions)
    reviews = list(reviews)
    challenges = list(challenges)

    reviewed = [s for s in submissions if s.get("is_reviewed")]
    reviewed_challenge_ids = {str(s.get("challenge_id")) for s in reviewed}
    category_of = {str(c.get("id")): c.get("category") for c in challenges}

    skill_samples: Dict[str, List[float]] = defaultdict(list)
    for review in reviews:
        category = category_of.get(str(review.get("challenge_id")))
        if category in CATEGORIES:
            skill_samples[category].append(_score(review))
    skill_scores = {category: _mean(skill_samples.get(category, [])) for category in CATEGORIES}

    difficulty_progress = {d: {"completed": 0, "total": 0} for d in DIFFICULTIES}
    for challenge in challenges:
        difficulty = challenge.get("difficulty")
        if difficulty not in difficulty_progress:
            continue
        difficulty_progress[difficulty]["total"] += 1
        if str(challenge.get("id")) in reviewed_challenge_ids:
            difficulty_progress[difficulty]["completed"] += 1

    submitted_dates = [d for d in (parse_datetime(s.get("submitted_at")) for s in reviewed) if d is not None]
    completed = len(reviewed)
    streak = min(completed, STREAK_CAP)

    return ProgressStats(
        total_challenges=len(submissions),
        completed_challenges=completed,
        average_score=_mean([_score(r) for r in reviews]),
        current_streak=streak,
        longest_streak=streak,
        last_challenge_date=max(submitted_dates) if submitted_dates else None,
        skill_scores=skill_scores,
        difficulty_progress=difficulty_progress,
        monthly_stats=_monthly_stats(reviews, category_of),
    )


__all__ = ["MonthlyStat", "ProgressStats", "STREAK_CAP", "aggregate_progress", "completed_by_category"]
