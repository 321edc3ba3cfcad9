import uuid

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from sasktask.db.base import BaseModel


class Profile(BaseModel):
    """Marketplace member. Trust and reputation columns are computed elsewhere."""

    __tablename__ = "profiles"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_reviews: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_tasks: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    trust_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    reputation_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    reliability_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    skills: Mapped[list | None] = mapped_column(JSONB, nullable=True, default=list)
    preferred_categories: Mapped[list | None] = mapped_column(JSONB, nullable=True, default=list)


class Badge(BaseModel):
    __tablename__ = "badges"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id"), nullable=False, index=True
    )
    badge_type: Mapped[str] = mapped_column(String(50), nullable=False)
    badge_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
