import uuid
from collections import Counter

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sasktask.common.enums import BookingStatus, TaskStatus
from sasktask.common.exceptions import NotFoundError
from sasktask.common.logging import get_logger
from sasktask.config import settings
from sasktask.core.matching.scorer import (
    CandidateTask,
    HistoryEntry,
    MatchProfile,
    ReputationMatchScorer,
)
from sasktask.db.models.task import Booking, Task
from sasktask.db.models.user import Badge, Profile

logger = get_logger("matching.service")

HISTORY_LIMIT = 20
OPEN_TASK_LIMIT = 100
TOP_RECOMMENDATIONS = 10
TOP_NEARBY = 8
DEFAULT_REASON = "New task in your area"


class TaskRecommendation(BaseModel):
    task_id: str
    title: str
    category: str
    pay_amount: float
    location: str
    priority: str | None
    match_score: int
    reasons: list[str]
    distance_km: float | None


class UserStats(BaseModel):
    completed_tasks: int
    top_categories: list[str]
    rating: float | None
    reputation_score: float | None


class RecommendationResult(BaseModel):
    recommendations: list[TaskRecommendation]
    nearby_tasks: list[TaskRecommendation]
    user_stats: UserStats


class RecommendationService:
    def __init__(self, scorer: ReputationMatchScorer | None = None) -> None:
        self.scorer = scorer

    async def recommend(
        self,
        user_id: uuid.UUID,
        db: AsyncSession,
        latitude: float | None = None,
        longitude: float | None = None,
        max_distance_km: float | None = None,
    ) -> RecommendationResult:
        max_distance = max_distance_km if max_distance_km is not None else settings.MATCH_MAX_DISTANCE_KM
        scorer = self.scorer or ReputationMatchScorer(max_distance_km=max_distance)

        result = await db.execute(
            select(Profile).where(Profile.id == user_id, Profile.is_deleted.is_(False))
        )
        profile = result.scalar_one_or_none()
        if not profile:
            raise NotFoundError("User", str(user_id))

        badge_count = (
            await db.execute(select(func.count()).select_from(Badge).where(Badge.user_id == user_id))
        ).scalar() or 0

        history_rows = await db.execute(
            select(Task.category, Task.pay_amount, Task.estimated_duration)
            .join(Booking, Booking.task_id == Task.id)
            .where(
                Booking.task_doer_id == user_id,
                Booking.status == BookingStatus.COMPLETED.value,
            )
            .limit(HISTORY_LIMIT)
        )
        history = tuple(
            HistoryEntry(
                category=category,
                pay_amount=float(pay) if pay is not None else None,
                estimated_duration=duration,
            )
            for category, pay, duration in history_rows.all()
        )

        user = MatchProfile(
            reputation_score=profile.reputation_score,
            trust_score=profile.trust_score,
            badge_count=badge_count,
            skills=tuple(profile.skills or ()),
            preferred_categories=tuple(profile.preferred_categories or ()),
            latitude=latitude if latitude is not None else profile.latitude,
            longitude=longitude if longitude is not None else profile.longitude,
            history=history,
        )

        open_tasks = await db.execute(
            select(Task)
            .where(Task.status == TaskStatus.OPEN.value, Task.is_deleted.is_(False))
            .order_by(Task.created_at.desc())
            .limit(OPEN_TASK_LIMIT)
        )

        scored: list[TaskRecommendation] = []
        for task in open_tasks.scalars().all():
            match = scorer.score(user, _candidate(task))
            scored.append(
                TaskRecommendation(
                    task_id=str(task.id),
                    title=task.title,
                    category=task.category,
                    pay_amount=float(task.pay_amount),
                    location=task.location,
                    priority=task.priority,
                    match_score=match.match_score,
                    reasons=match.reasons or [DEFAULT_REASON],
                    distance_km=match.distance_km,
                )
            )

        scored.sort(key=lambda r: r.match_score, reverse=True)
        nearby = sorted(
            (r for r in scored if r.distance_km is not None and r.distance_km <= max_distance),
            key=lambda r: r.distance_km,
        )

        frequency = Counter(h.category for h in history)
        logger.info(
            "Scored %d open tasks for user %s (%d nearby)", len(scored), user_id, len(nearby)
        )
        return RecommendationResult(
            recommendations=scored[:TOP_RECOMMENDATIONS],
            nearby_tasks=nearby[:TOP_NEARBY],
            user_stats=UserStats(
                completed_tasks=len(history),
                top_categories=[c for c, _ in frequency.most_common(3)],
                rating=profile.rating,
                reputation_score=profile.reputation_score,
            ),
        )


def _candidate(task: Task) -> CandidateTask:
    poster = task.task_giver
    return CandidateTask(
        id=str(task.id),
        title=task.title,
        description=task.description or "",
        category=task.category,
        pay_amount=float(task.pay_amount),
        estimated_duration=task.estimated_duration,
        latitude=task.latitude,
        longitude=task.longitude,
        priority=task.priority,
        poster_rating=poster.rating if poster is not None else None,
    )
