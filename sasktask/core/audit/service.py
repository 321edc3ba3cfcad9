import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sasktask.common.exceptions import NotFoundError
from sasktask.common.logging import get_logger
from sasktask.core.audit.chain import ChainVerification, verify_audit_chain
from sasktask.db.models.audit import AuditTrailEvent
from sasktask.db.models.task import Booking

logger = get_logger("audit.service")


class AuditTrailService:
    async def verify_booking(self, booking_id: uuid.UUID, db: AsyncSession) -> ChainVerification:
        booking = await db.execute(
            select(Booking.id).where(Booking.id == booking_id, Booking.is_deleted.is_(False))
        )
        if booking.scalar_one_or_none() is None:
            raise NotFoundError("Booking", str(booking_id))

        result = await db.execute(
            select(AuditTrailEvent)
            .where(AuditTrailEvent.booking_id == booking_id)
            .order_by(AuditTrailEvent.created_at.asc())
        )
        verification = verify_audit_chain(result.scalars().all())

        if not verification.intact:
            logger.warning(
                "Audit chain for booking %s broken at event %d of %d",
                booking_id,
                verification.broken_at,
                verification.event_count,
            )
        return verification
