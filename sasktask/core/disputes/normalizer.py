"""Reduces collected dispute evidence to a fixed-shape summary.

The summary is the only thing the scoring strategies see. It is also stored
verbatim next to every analysis, so it must be deterministic: the same
``CollectedEvidence`` always produces the same JSON.
"""

from __future__ import annotations

import json

from sasktask.common.enums import ChecklistStatus, CheckinType
from sasktask.core.disputes.schemas import (
    BookingContext,
    CheckinSummary,
    ChecklistSummary,
    CollectedEvidence,
    DisputeContext,
    EvidenceCount,
    EvidenceSummary,
    PartyProfile,
    PartyProfiles,
    PartySummary,
    TaskContext,
)


def _party(profile: PartyProfile | None) -> PartySummary | None:
    if profile is None:
        return None
    return PartySummary(
        trust_score=profile.trust_score,
        rating=profile.rating,
        completed_tasks=profile.completed_tasks,
    )


def build_evidence_summary(collected: CollectedEvidence) -> EvidenceSummary:
    dispute = collected.dispute
    checkins = collected.checkins
    checklist = collected.checklist

    task = None
    if dispute.task is not None:
        task = TaskContext(
            title=dispute.task.title,
            description=dispute.task.description,
            pay_amount=dispute.task.pay_amount,
            scheduled_date=dispute.task.scheduled_date,
        )

    booking = None
    if dispute.booking is not None:
        booking = BookingContext(
            status=dispute.booking.status,
            created_at=dispute.booking.created_at,
            deposit_paid=dispute.booking.deposit_paid,
        )

    return EvidenceSummary(
        dispute=DisputeContext(
            reason=dispute.reason,
            details=dispute.details,
            created_at=dispute.created_at,
        ),
        task=task,
        booking=booking,
        evidence_count=EvidenceCount(
            dispute_evidence=len(collected.dispute_evidence),
            work_evidence=len(collected.work_evidence),
        ),
        checkins=CheckinSummary(
            total=len(checkins),
            started=any(c.checkin_type == CheckinType.START for c in checkins),
            completed=any(c.checkin_type == CheckinType.END for c in checkins),
            locations_verified=sum(1 for c in checkins if c.has_location),
        ),
        checklist=ChecklistSummary(
            total_items=len(checklist),
            approved=sum(1 for c in checklist if c.status == ChecklistStatus.APPROVED),
            rejected=sum(1 for c in checklist if c.status == ChecklistStatus.REJECTED),
            pending=sum(1 for c in checklist if c.status == ChecklistStatus.PENDING),
            photo_required=sum(1 for c in checklist if c.requires_photo),
        ),
        audit_events=len(collected.audit_events),
        party_profiles=PartyProfiles(
            raiser=_party(collected.raiser_profile),
            against=_party(collected.against_profile),
        ),
    )


def summary_to_json(summary: EvidenceSummary) -> str:
    """Canonical serialization used for persistence and equality checks."""
    return json.dumps(summary.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
