import uuid

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from sasktask.common.enums import AnalysisType, Recommendation, ScoringModel
from sasktask.db.base import AppendOnlyModel


class DisputeAnalysis(AppendOnlyModel):
    __tablename__ = "dispute_analysis"

    dispute_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("disputes.id"), nullable=False, index=True
    )
    analysis_type: Mapped[AnalysisType] = mapped_column(String(20), nullable=False)
    model_identifier: Mapped[ScoringModel] = mapped_column(String(20), nullable=False)
    ai_model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    risk_score: Mapped[int] = mapped_column(Integer, nullable=False)
    confidence_score: Mapped[int] = mapped_column(Integer, nullable=False)
    recommendation: Mapped[Recommendation] = mapped_column(String(30), nullable=False)
    reasoning: Mapped[str] = mapped_column(Text, nullable=False, default="")
    inconsistencies: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    suggested_resolution: Mapped[str] = mapped_column(Text, nullable=False, default="")
    evidence_summary: Mapped[dict] = mapped_column(JSONB, nullable=False)
