"""
Seed script for the SaskTask trust engine.

Populates the database with a small Saskatoon-area marketplace: profiles,
open tasks for the recommendation endpoint, and one disputed booking with
check-ins, checklist completions, work evidence and a hash-chained audit
trail for the dispute analysis endpoint.

Usage:
    python -m sasktask.scripts.seed
"""

import asyncio
import hashlib
import json
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select

from sasktask.common.enums import (
    BookingStatus,
    ChecklistStatus,
    CheckinType,
    DisputeReason,
    DisputeStatus,
    TaskPriority,
    TaskStatus,
)
from sasktask.db.models import (
    AuditTrailEvent,
    Badge,
    Booking,
    ChecklistCompletion,
    Dispute,
    Profile,
    Task,
    TaskChecklist,
    TaskCheckin,
    WorkEvidence,
)
from sasktask.db.session import async_session_factory

SEED_GIVER_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")


def _event_hash(previous_hash: str | None, event_type: str, data: dict) -> str:
    payload = json.dumps({"prev": previous_hash, "type": event_type, "data": data}, sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()


async def main() -> None:
    async with async_session_factory() as session:
        # ------------------------------------------------------------------
        # Guard: skip if already seeded
        # ------------------------------------------------------------------
        result = await session.execute(select(Profile).where(Profile.id == SEED_GIVER_ID))
        if result.scalar_one_or_none() is not None:
            print("Database already seeded -- skipping.")
            return

        now = datetime.now(timezone.utc)

        # ==================================================================
        # PROFILES
        # ==================================================================
        giver = Profile(
            id=SEED_GIVER_ID,
            full_name="Maya Fontaine",
            city="Saskatoon",
            rating=4.7,
            total_reviews=31,
            trust_score=82,
            reputation_score=76,
            latitude=52.1332,
            longitude=-106.6700,
        )
        doer = Profile(
            id=uuid.uuid4(),
            full_name="Devon Rasmussen",
            city="Saskatoon",
            rating=4.4,
            total_reviews=18,
            completed_tasks=2,
            trust_score=71,
            reputation_score=64,
            latitude=52.1200,
            longitude=-106.6500,
            skills=["snow removal", "furniture assembly", "painting"],
            preferred_categories=["Snow Removal", "Handyman"],
        )
        session.add_all([giver, doer])
        await session.flush()

        session.add_all(
            [
                Badge(user_id=doer.id, badge_type="verified_id", badge_level="gold"),
                Badge(user_id=doer.id, badge_type="background_check", badge_level="silver"),
            ]
        )

        # ==================================================================
        # COMPLETED HISTORY (drives pay / duration / category affinity)
        # ==================================================================
        for title, pay in [("Clear driveway after storm", "60.00"), ("Shovel walkway", "45.00")]:
            past = Task(
                task_giver_id=giver.id,
                title=title,
                category="Snow Removal",
                pay_amount=Decimal(pay),
                estimated_duration=2,
                location="Nutana, Saskatoon",
                status=TaskStatus.COMPLETED.value,
            )
            session.add(past)
            await session.flush()
            session.add(
                Booking(task_id=past.id, task_doer_id=doer.id, status=BookingStatus.COMPLETED.value)
            )

        # ==================================================================
        # OPEN TASKS
        # ==================================================================
        open_tasks = [
            ("Snow removal for corner lot", "Snow Removal", "55.00", 2, 52.1290, -106.6600, TaskPriority.URGENT),
            ("Assemble IKEA wardrobe", "Handyman", "80.00", 3, 52.1450, -106.6900, TaskPriority.MEDIUM),
            ("Paint garden fence", "Painting", "150.00", 6, 52.2000, -106.5000, TaskPriority.LOW),
            ("Move boxes to storage", "Moving", "90.00", 3, None, None, TaskPriority.HIGH),
        ]
        for title, category, pay, duration, lat, lng, priority in open_tasks:
            session.add(
                Task(
                    task_giver_id=giver.id,
                    title=title,
                    category=category,
                    pay_amount=Decimal(pay),
                    estimated_duration=duration,
                    location="Saskatoon, SK",
                    latitude=lat,
                    longitude=lng,
                    priority=priority.value,
                    status=TaskStatus.OPEN.value,
                )
            )

        # ==================================================================
        # DISPUTED BOOKING
        # ==================================================================
        disputed_task = Task(
            task_giver_id=giver.id,
            title="Deep clean two-bedroom apartment",
            description="Move-out clean including oven and fridge",
            category="Cleaning",
            pay_amount=Decimal("180.00"),
            estimated_duration=5,
            location="Broadway, Saskatoon",
            latitude=52.1240,
            longitude=-106.6560,
            status=TaskStatus.COMPLETED.value,
            scheduled_date=now - timedelta(days=3),
        )
        session.add(disputed_task)
        await session.flush()

        booking = Booking(
            task_id=disputed_task.id,
            task_doer_id=doer.id,
            status=BookingStatus.DISPUTED.value,
            deposit_paid=True,
        )
        session.add(booking)
        await session.flush()

        checklist = [
            TaskChecklist(task_id=disputed_task.id, title="Kitchen", requires_photo=True, display_order=1),
            TaskChecklist(task_id=disputed_task.id, title="Bathroom", requires_photo=True, display_order=2),
            TaskChecklist(task_id=disputed_task.id, title="Floors", display_order=3),
        ]
        session.add_all(checklist)
        await session.flush()

        for item, status in zip(
            checklist, [ChecklistStatus.APPROVED, ChecklistStatus.REJECTED, ChecklistStatus.PENDING]
        ):
            session.add(
                ChecklistCompletion(
                    booking_id=booking.id,
                    checklist_id=item.id,
                    completed_by=doer.id,
                    status=status.value,
                    rejection_reason="Grout not cleaned" if status == ChecklistStatus.REJECTED else None,
                )
            )

        session.add_all(
            [
                TaskCheckin(
                    booking_id=booking.id,
                    user_id=doer.id,
                    checkin_type=CheckinType.START.value,
                    latitude=52.1241,
                    longitude=-106.6561,
                    location_accuracy=8.5,
                    created_at=now - timedelta(days=3, hours=5),
                ),
                TaskCheckin(
                    booking_id=booking.id,
                    user_id=doer.id,
                    checkin_type=CheckinType.END.value,
                    latitude=52.1240,
                    longitude=-106.6559,
                    location_accuracy=6.0,
                    created_at=now - timedelta(days=3, hours=1),
                ),
                WorkEvidence(
                    booking_id=booking.id,
                    uploaded_by=doer.id,
                    file_url="https://storage.example.com/work/kitchen-after.jpg",
                    file_name="kitchen-after.jpg",
                    file_type="image/jpeg",
                    file_size=482133,
                ),
            ]
        )

        previous_hash = None
        for offset, (event_type, data) in enumerate(
            [
                ("booking_created", {"task_id": str(disputed_task.id)}),
                ("deposit_paid", {"amount": "180.00"}),
                ("task_completed", {"checklist_items": 3}),
            ]
        ):
            event_hash = _event_hash(previous_hash, event_type, data)
            session.add(
                AuditTrailEvent(
                    booking_id=booking.id,
                    user_id=giver.id,
                    event_type=event_type,
                    event_category="booking",
                    event_data=data,
                    event_hash=event_hash,
                    previous_hash=previous_hash,
                    created_at=now - timedelta(days=4) + timedelta(hours=offset),
                )
            )
            previous_hash = event_hash

        dispute = Dispute(
            booking_id=booking.id,
            task_id=disputed_task.id,
            raised_by=giver.id,
            against_user=doer.id,
            dispute_reason=DisputeReason.INCOMPLETE_WORK.value,
            dispute_details="Bathroom was left unfinished and the oven was not cleaned.",
            status=DisputeStatus.OPEN.value,
        )
        session.add(dispute)

        # ==================================================================
        # COMMIT
        # ==================================================================
        await session.commit()

        print(f"Seeded: 2 profiles, {len(open_tasks)} open tasks, dispute {dispute.id} (user {doer.id})")


if __name__ == "__main__":
    asyncio.run(main())
