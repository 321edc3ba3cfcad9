import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sasktask.api.deps import get_db
from sasktask.core.audit.chain import ChainVerification
from sasktask.core.audit.service import AuditTrailService

router = APIRouter(prefix="/bookings", tags=["Audit Trail"])


@router.get("/{booking_id}/audit-trail/verification", response_model=ChainVerification)
async def verify_audit_trail(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await AuditTrailService().verify_booking(booking_id, db)
