import uuid

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sasktask.common.enums import DisputeReason, DisputeStatus
from sasktask.db.base import BaseModel


class Dispute(BaseModel):
    __tablename__ = "disputes"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bookings.id"), nullable=False, index=True
    )
    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tasks.id"), nullable=False
    )
    raised_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False
    )
    against_user: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False
    )
    dispute_reason: Mapped[DisputeReason] = mapped_column(String(30), nullable=False)
    dispute_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[DisputeStatus] = mapped_column(
        String(30), nullable=False, default=DisputeStatus.OPEN.value
    )
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    booking = relationship("Booking")
