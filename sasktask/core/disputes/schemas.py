"""Immutable value types flowing through the dispute analysis pipeline.

Rows coming out of the ORM are converted into these models by the evidence
collector so that the normalizer and the scoring strategies never touch a
session or a lazily-loaded attribute.
"""

from __future__ import annotations

from datetime import datetime
from typing import Union

from pydantic import BaseModel, Field, field_validator

from sasktask.common.enums import (
    AnalysisType,
    ChecklistStatus,
    CheckinType,
    Recommendation,
    ScoringModel,
)

_FROZEN = {"frozen": True}


# ---------------------------------------------------------------------------
# Collected records
# ---------------------------------------------------------------------------


class TaskSnapshot(BaseModel):
    model_config = _FROZEN

    title: str
    description: str | None = None
    pay_amount: float | None = None
    scheduled_date: datetime | None = None


class BookingSnapshot(BaseModel):
    model_config = _FROZEN

    status: str | None = None
    created_at: datetime | None = None
    deposit_paid: bool = False


class DisputeRecord(BaseModel):
    model_config = _FROZEN

    id: str
    booking_id: str
    raised_by: str
    against_user: str
    reason: str
    details: str | None = None
    created_at: datetime | None = None
    booking: BookingSnapshot | None = None
    task: TaskSnapshot | None = None


class EvidenceItem(BaseModel):
    model_config = _FROZEN

    kind: str  # "dispute" or "work"
    file_url: str
    uploaded_by: str
    created_at: datetime | None = None


class CheckinEvent(BaseModel):
    model_config = _FROZEN

    checkin_type: CheckinType
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime | None = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class ChecklistItem(BaseModel):
    model_config = _FROZEN

    status: ChecklistStatus = ChecklistStatus.PENDING
    requires_photo: bool = False

    @field_validator("status", mode="before")
    @classmethod
    def _null_is_pending(cls, v):
        return v or ChecklistStatus.PENDING


class AuditEvent(BaseModel):
    model_config = _FROZEN

    event_type: str
    event_hash: str | None = None
    previous_hash: str | None = None
    created_at: datetime | None = None


class PartyProfile(BaseModel):
    model_config = _FROZEN

    user_id: str
    trust_score: float | None = None
    rating: float | None = None
    completed_tasks: int | None = None
    reputation_score: float | None = None


class CollectedEvidence(BaseModel):
    """Everything the collector gathered for one dispute. Missing sources are empty."""

    model_config = _FROZEN

    dispute: DisputeRecord
    dispute_evidence: tuple[EvidenceItem, ...] = ()
    work_evidence: tuple[EvidenceItem, ...] = ()
    checkins: tuple[CheckinEvent, ...] = ()
    checklist: tuple[ChecklistItem, ...] = ()
    audit_events: tuple[AuditEvent, ...] = ()
    raiser_profile: PartyProfile | None = None
    against_profile: PartyProfile | None = None


# ---------------------------------------------------------------------------
# Normalized summary
# ---------------------------------------------------------------------------


class DisputeContext(BaseModel):
    model_config = _FROZEN

    reason: str
    details: str | None
    created_at: datetime | None


class TaskContext(BaseModel):
    model_config = _FROZEN

    title: str
    description: str | None
    pay_amount: float | None
    scheduled_date: datetime | None


class BookingContext(BaseModel):
    model_config = _FROZEN

    status: str | None
    created_at: datetime | None
    deposit_paid: bool


class EvidenceCount(BaseModel):
    model_config = _FROZEN

    dispute_evidence: int = 0
    work_evidence: int = 0

    @property
    def total(self) -> int:
        return self.dispute_evidence + self.work_evidence


class CheckinSummary(BaseModel):
    model_config = _FROZEN

    total: int = 0
    started: bool = False
    completed: bool = False
    locations_verified: int = 0


class ChecklistSummary(BaseModel):
    model_config = _FROZEN

    total_items: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0
    photo_required: int = 0

    @property
    def all_approved(self) -> bool:
        return self.approved == self.total_items


class PartySummary(BaseModel):
    model_config = _FROZEN

    trust_score: float | None
    rating: float | None
    completed_tasks: int | None


class PartyProfiles(BaseModel):
    model_config = _FROZEN

    raiser: PartySummary | None = None
    against: PartySummary | None = None


class EvidenceSummary(BaseModel):
    model_config = _FROZEN

    dispute: DisputeContext
    task: TaskContext | None = None
    booking: BookingContext | None = None
    evidence_count: EvidenceCount = EvidenceCount()
    checkins: CheckinSummary = CheckinSummary()
    checklist: ChecklistSummary = ChecklistSummary()
    audit_events: int = 0
    party_profiles: PartyProfiles = PartyProfiles()

    @property
    def has_evidence(self) -> bool:
        return self.evidence_count.total > 0

    @property
    def has_checkins(self) -> bool:
        return self.checkins.total > 0


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


class ScoredAnalysis(BaseModel):
    """Output of a scoring strategy, before persistence."""

    model_config = _FROZEN

    model_identifier: ScoringModel
    ai_model: str | None = None
    risk_score: int = Field(ge=0, le=100)
    confidence_score: int = Field(ge=0, le=100)
    recommendation: Recommendation
    reasoning: str = ""
    inconsistencies: tuple[str, ...] = ()
    suggested_resolution: str = ""


class ParsedAnalysis(BaseModel):
    """Validated fields from a model reply. ``None`` means absent or unusable."""

    model_config = _FROZEN

    risk_score: int | None = None
    confidence_score: int | None = None
    recommendation: Recommendation | None = None
    reasoning: str | None = None
    inconsistencies: tuple[str, ...] | None = None
    suggested_resolution: str | None = None


class ParseFailure(BaseModel):
    model_config = _FROZEN

    reason: str
    raw_excerpt: str = ""


ParseResult = Union[ParsedAnalysis, ParseFailure]


class DisputeAnalysisResult(BaseModel):
    id: str
    dispute_id: str
    analysis_type: AnalysisType
    model_identifier: ScoringModel
    ai_model: str | None
    risk_score: int
    confidence_score: int
    recommendation: Recommendation
    reasoning: str
    inconsistencies: list[str]
    suggested_resolution: str
    evidence_summary: dict
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
