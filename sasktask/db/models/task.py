import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sasktask.common.enums import BookingStatus, TaskPriority, TaskStatus
from sasktask.db.base import BaseModel


class Task(BaseModel):
    __tablename__ = "tasks"

    task_giver_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    pay_amount: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False)
    estimated_duration: Mapped[float | None] = mapped_column(Float, nullable=True)
    location: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    priority: Mapped[TaskPriority | None] = mapped_column(
        String(20), nullable=True, default=TaskPriority.MEDIUM.value
    )
    status: Mapped[TaskStatus] = mapped_column(
        String(20), nullable=False, default=TaskStatus.OPEN.value, index=True
    )
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    task_giver = relationship("Profile", lazy="selectin")


class Booking(BaseModel):
    __tablename__ = "bookings"

    task_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tasks.id"), nullable=False, index=True
    )
    task_doer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )
    status: Mapped[BookingStatus] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value
    )
    deposit_paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    task = relationship("Task")
