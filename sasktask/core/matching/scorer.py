"""Reputation-weighted task match scoring.

A match score is the sum of independent, capped factor contributions:

    category affinity   <= 30
    pay alignment       <= 20
    duration fit        <= 15
    location proximity  <= 15
    skill overlap       <= 10
    urgency             <= 5
    poster rating       <= 5
    reputation tier     <= 15

The total is clamped to [0, 100]. Every factor that contributes appends a
human-readable reason. Scoring is pure and cheap enough to recompute per
request.
"""

from __future__ import annotations

import math
from collections import Counter
from functools import cached_property

from pydantic import BaseModel

from sasktask.common.enums import TaskPriority
from sasktask.core.matching.geo import haversine_km

DEFAULT_DURATION_HOURS = 2.0
DEFAULT_TRUST_SCORE = 50.0

_URGENT = {TaskPriority.HIGH.value, TaskPriority.URGENT.value}


class HistoryEntry(BaseModel):
    model_config = {"frozen": True}

    category: str
    pay_amount: float | None = None
    estimated_duration: float | None = None


class MatchProfile(BaseModel):
    """The user side of a match: reputation, preferences and completed work."""

    model_config = {"frozen": True}

    reputation_score: float | None = None
    trust_score: float | None = None
    badge_count: int = 0
    skills: tuple[str, ...] = ()
    preferred_categories: tuple[str, ...] = ()
    latitude: float | None = None
    longitude: float | None = None
    history: tuple[HistoryEntry, ...] = ()

    @cached_property
    def category_frequency(self) -> Counter:
        return Counter(h.category for h in self.history)

    @cached_property
    def average_pay(self) -> float:
        if not self.history:
            return 0.0
        return sum(h.pay_amount or 0 for h in self.history) / len(self.history)

    @cached_property
    def average_duration(self) -> float:
        if not self.history:
            return DEFAULT_DURATION_HOURS
        return sum(h.estimated_duration or DEFAULT_DURATION_HOURS for h in self.history) / len(self.history)


class CandidateTask(BaseModel):
    model_config = {"frozen": True}

    id: str
    title: str
    description: str = ""
    category: str
    pay_amount: float = 0.0
    estimated_duration: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    priority: str | None = None
    poster_rating: float | None = None


class MatchResult(BaseModel):
    match_score: int
    reasons: list[str]
    factors: dict[str, int]
    distance_km: float | None = None


class ReputationMatchScorer:
    def __init__(self, max_distance_km: float = 50.0) -> None:
        self.max_distance_km = max_distance_km

    def score(self, user: MatchProfile, task: CandidateTask) -> MatchResult:
        distance = haversine_km(user.latitude, user.longitude, task.latitude, task.longitude)

        factors: dict[str, int] = {}
        reasons: list[str] = []
        for name, (points, reason) in (
            ("category", self._category(user, task)),
            ("pay", self._pay(user, task)),
            ("duration", self._duration(user, task)),
            ("proximity", self._proximity(distance)),
            ("skills", self._skills(user, task)),
            ("urgency", self._urgency(task)),
            ("poster_rating", self._poster_rating(task)),
            ("reputation", self._reputation(user)),
        ):
            factors[name] = points
            if points > 0:
                reasons.append(reason)

        return MatchResult(
            match_score=max(0, min(100, sum(factors.values()))),
            reasons=reasons,
            factors=factors,
            distance_km=None if math.isinf(distance) else round(distance, 2),
        )

    # ------------------------------------------------------------------
    # Factors: each returns (points, reason)
    # ------------------------------------------------------------------

    def _category(self, user: MatchProfile, task: CandidateTask) -> tuple[int, str]:
        done = user.category_frequency.get(task.category, 0)
        if done > 0:
            return min(30, done * 10), f"You've completed {done} {task.category} task(s)"
        if task.category in user.preferred_categories:
            return 20, f"Matches your preferred category: {task.category}"
        return 0, ""

    def _pay(self, user: MatchProfile, task: CandidateTask) -> tuple[int, str]:
        avg = user.average_pay
        if avg <= 0:
            return 0, ""
        diff = abs(task.pay_amount - avg) / avg
        if diff < 0.2:
            return 20, "Pay matches your usual range"
        if diff < 0.5:
            return 10, "Pay is close to your usual range"
        return 0, ""

    def _duration(self, user: MatchProfile, task: CandidateTask) -> tuple[int, str]:
        avg = user.average_duration
        if avg <= 0:
            return 0, ""
        diff = abs((task.estimated_duration or DEFAULT_DURATION_HOURS) - avg) / avg
        if diff < 0.3:
            return 15, "Duration fits your schedule"
        if diff < 0.6:
            return 8, "Duration is close to your usual tasks"
        return 0, ""

    def _proximity(self, distance: float) -> tuple[int, str]:
        if math.isinf(distance):
            return 0, ""
        if distance < 5:
            return 15, f"Only {distance:.1f}km away"
        if distance < 10:
            return 12, f"{distance:.1f}km from you"
        if distance < 25:
            return 7, f"{distance:.1f}km away"
        if distance < self.max_distance_km:
            return 3, f"Within {self.max_distance_km:.0f}km"
        return 0, ""

    def _skills(self, user: MatchProfile, task: CandidateTask) -> tuple[int, str]:
        # Substring match: a short skill like "art" also matches "cart".
        text = f"{task.title} {task.description}".lower()
        matching = [s for s in user.skills if s and s.lower() in text]
        if not matching:
            return 0, ""
        return min(10, len(matching) * 5), f"Matches your skills: {', '.join(matching)}"

    def _urgency(self, task: CandidateTask) -> tuple[int, str]:
        if task.priority in _URGENT:
            return 5, "High priority task"
        return 0, ""

    def _poster_rating(self, task: CandidateTask) -> tuple[int, str]:
        rating = task.poster_rating or 0
        if rating >= 4.5:
            return 5, "Highly rated task poster"
        if rating >= 4.0:
            return 3, "Well rated task poster"
        return 0, ""

    def _reputation(self, user: MatchProfile) -> tuple[int, str]:
        reputation = user.reputation_score or 0
        trust = user.trust_score if user.trust_score is not None else DEFAULT_TRUST_SCORE
        if reputation >= 80:
            return 15, "Top performer match"
        if reputation >= 60:
            return 10, "Recommended for verified professionals"
        if trust >= 70 or user.badge_count >= 3:
            return 5, "Trusted performer match"
        return 0, ""
