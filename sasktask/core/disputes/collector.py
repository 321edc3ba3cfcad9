"""Read-only aggregation of everything known about a dispute."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import joinedload

from sasktask.common.enums import ChecklistStatus, CheckinType
from sasktask.common.exceptions import NotFoundError
from sasktask.common.logging import get_logger
from sasktask.core.disputes.schemas import (
    AuditEvent,
    BookingSnapshot,
    CheckinEvent,
    ChecklistItem,
    CollectedEvidence,
    DisputeRecord,
    EvidenceItem,
    PartyProfile,
    TaskSnapshot,
)
from sasktask.db.models.audit import AuditTrailEvent
from sasktask.db.models.dispute import Dispute
from sasktask.db.models.evidence import (
    ChecklistCompletion,
    DisputeEvidence,
    TaskChecklist,
    TaskCheckin,
    WorkEvidence,
)
from sasktask.db.models.task import Booking
from sasktask.db.models.user import Profile

logger = get_logger("disputes.collector")

T = TypeVar("T")


def _float(value) -> float | None:
    return float(value) if value is not None else None


def _checkin_type(value) -> CheckinType | None:
    try:
        return CheckinType(value)
    except ValueError:
        return None


def _checklist_status(value) -> ChecklistStatus:
    # Unknown statuses count as pending so they can never read as approved.
    if value is None:
        return ChecklistStatus.PENDING
    try:
        return ChecklistStatus(value)
    except ValueError:
        return ChecklistStatus.PENDING


class EvidenceCollector:
    """Fetches a dispute and its evidence sources.

    Every source after the dispute itself is read concurrently in its own
    session. A source that fails to load is logged and treated as empty.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def collect(self, dispute_id: str) -> CollectedEvidence:
        dispute = await self.load_dispute(dispute_id)
        did = uuid.UUID(dispute.id)
        booking_id = uuid.UUID(dispute.booking_id)

        (
            dispute_evidence,
            work_evidence,
            checkins,
            checklist,
            audit_events,
            profiles,
        ) = await asyncio.gather(
            self._safe("dispute_evidence", dispute.id, self._dispute_evidence(did), ()),
            self._safe("work_evidence", dispute.id, self._work_evidence(booking_id), ()),
            self._safe("checkins", dispute.id, self._checkins(booking_id), ()),
            self._safe("checklist", dispute.id, self._checklist(booking_id), ()),
            self._safe("audit_events", dispute.id, self._audit_events(booking_id), ()),
            self._safe(
                "profiles",
                dispute.id,
                self._profiles([uuid.UUID(dispute.raised_by), uuid.UUID(dispute.against_user)]),
                {},
            ),
        )

        return CollectedEvidence(
            dispute=dispute,
            dispute_evidence=dispute_evidence,
            work_evidence=work_evidence,
            checkins=checkins,
            checklist=checklist,
            audit_events=audit_events,
            raiser_profile=profiles.get(dispute.raised_by),
            against_profile=profiles.get(dispute.against_user),
        )

    async def load_dispute(self, dispute_id: str) -> DisputeRecord:
        try:
            did = uuid.UUID(str(dispute_id))
        except ValueError:
            raise NotFoundError("Dispute", str(dispute_id))

        async with self._session_factory() as db:
            result = await db.execute(
                select(Dispute)
                .options(joinedload(Dispute.booking).joinedload(Booking.task))
                .where(Dispute.id == did, Dispute.is_deleted.is_(False))
            )
            dispute = result.unique().scalar_one_or_none()

        if not dispute:
            raise NotFoundError("Dispute", str(dispute_id))

        booking = dispute.booking
        task = booking.task if booking is not None else None
        return DisputeRecord(
            id=str(dispute.id),
            booking_id=str(dispute.booking_id),
            raised_by=str(dispute.raised_by),
            against_user=str(dispute.against_user),
            reason=dispute.dispute_reason,
            details=dispute.dispute_details,
            created_at=dispute.created_at,
            booking=BookingSnapshot(
                status=booking.status,
                created_at=booking.created_at,
                deposit_paid=booking.deposit_paid,
            )
            if booking is not None
            else None,
            task=TaskSnapshot(
                title=task.title,
                description=task.description,
                pay_amount=_float(task.pay_amount),
                scheduled_date=task.scheduled_date,
            )
            if task is not None
            else None,
        )

    async def _safe(self, source: str, dispute_id: str, fetch: Awaitable[T], empty: T) -> T:
        try:
            return await fetch
        except Exception as e:
            logger.warning("Source '%s' unavailable for dispute %s, treating as empty: %s", source, dispute_id, e)
            return empty

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    async def _dispute_evidence(self, dispute_id: uuid.UUID) -> tuple[EvidenceItem, ...]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(DisputeEvidence)
                .where(DisputeEvidence.dispute_id == dispute_id)
                .order_by(DisputeEvidence.created_at)
            )
            rows = result.scalars().all()
        return tuple(
            EvidenceItem(kind="dispute", file_url=r.file_url, uploaded_by=str(r.uploaded_by), created_at=r.created_at)
            for r in rows
        )

    async def _work_evidence(self, booking_id: uuid.UUID) -> tuple[EvidenceItem, ...]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(WorkEvidence)
                .where(WorkEvidence.booking_id == booking_id)
                .order_by(WorkEvidence.created_at)
            )
            rows = result.scalars().all()
        return tuple(
            EvidenceItem(kind="work", file_url=r.file_url, uploaded_by=str(r.uploaded_by), created_at=r.created_at)
            for r in rows
        )

    async def _checkins(self, booking_id: uuid.UUID) -> tuple[CheckinEvent, ...]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(TaskCheckin)
                .where(TaskCheckin.booking_id == booking_id)
                .order_by(TaskCheckin.created_at.asc())
            )
            rows = result.scalars().all()

        events = []
        for r in rows:
            checkin_type = _checkin_type(r.checkin_type)
            if checkin_type is None:
                logger.warning("Ignoring check-in %s with unknown type %r", r.id, r.checkin_type)
                continue
            events.append(
                CheckinEvent(
                    checkin_type=checkin_type,
                    latitude=r.latitude,
                    longitude=r.longitude,
                    created_at=r.created_at,
                )
            )
        return tuple(events)

    async def _checklist(self, booking_id: uuid.UUID) -> tuple[ChecklistItem, ...]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(ChecklistCompletion.status, TaskChecklist.requires_photo)
                .outerjoin(TaskChecklist, ChecklistCompletion.checklist_id == TaskChecklist.id)
                .where(ChecklistCompletion.booking_id == booking_id)
                .order_by(ChecklistCompletion.created_at)
            )
            rows = result.all()

        items = []
        for status, requires_photo in rows:
            normalized = _checklist_status(status)
            if status is not None and normalized.value != status:
                logger.warning("Checklist completion with unknown status %r counted as pending", status)
            items.append(ChecklistItem(status=normalized, requires_photo=bool(requires_photo)))
        return tuple(items)

    async def _audit_events(self, booking_id: uuid.UUID) -> tuple[AuditEvent, ...]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(AuditTrailEvent)
                .where(AuditTrailEvent.booking_id == booking_id)
                .order_by(AuditTrailEvent.created_at.asc())
            )
            rows = result.scalars().all()
        return tuple(
            AuditEvent(
                event_type=r.event_type,
                event_hash=r.event_hash,
                previous_hash=r.previous_hash,
                created_at=r.created_at,
            )
            for r in rows
        )

    async def _profiles(self, user_ids: list[uuid.UUID]) -> dict[str, PartyProfile]:
        async with self._session_factory() as db:
            result = await db.execute(select(Profile).where(Profile.id.in_(user_ids)))
            rows = result.scalars().all()
        return {
            str(p.id): PartyProfile(
                user_id=str(p.id),
                trust_score=p.trust_score,
                rating=p.rating,
                completed_tasks=p.completed_tasks,
                reputation_score=p.reputation_score,
            )
            for p in rows
        }
