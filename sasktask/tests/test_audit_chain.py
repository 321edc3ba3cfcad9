import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from sasktask.core.audit.chain import verify_audit_chain
from sasktask.db.models.audit import AuditTrailEvent


def _chain(*hashes):
    events = []
    previous = None
    for h in hashes:
        events.append(SimpleNamespace(event_hash=h, previous_hash=previous))
        previous = h
    return events


def test_empty_chain_is_intact():
    result = verify_audit_chain([])
    assert result.intact is True
    assert result.event_count == 0


def test_linked_chain_is_intact():
    result = verify_audit_chain(_chain("a", "b", "c"))

    assert result.intact is True
    assert result.event_count == 3
    assert result.broken_at is None


def test_reports_first_broken_link():
    events = _chain("a", "b", "c", "d")
    events[2].previous_hash = "tampered"

    result = verify_audit_chain(events)

    assert result.intact is False
    assert result.broken_at == 2


async def test_verification_endpoint(client, add_rows, booking, task_giver):
    start = datetime.now(timezone.utc) - timedelta(hours=1)
    await add_rows(
        *[
            AuditTrailEvent(
                booking_id=booking.id,
                user_id=task_giver.id,
                event_type=event_type,
                event_category="booking",
                event_hash=h,
                previous_hash=prev,
                created_at=start + timedelta(minutes=i),
            )
            for i, (event_type, h, prev) in enumerate(
                [("created", "h1", None), ("paid", "h2", "h1"), ("completed", "h3", "oops")]
            )
        ]
    )

    response = await client.get(f"/api/v1/bookings/{booking.id}/audit-trail/verification")

    assert response.status_code == 200
    assert response.json() == {"intact": False, "event_count": 3, "broken_at": 2}


async def test_verification_unknown_booking(client):
    response = await client.get(f"/api/v1/bookings/{uuid.uuid4()}/audit-trail/verification")
    assert response.status_code == 404
