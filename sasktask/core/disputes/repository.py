import uuid

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from sasktask.common.enums import AnalysisType
from sasktask.core.disputes.schemas import DisputeAnalysisResult, EvidenceSummary, ScoredAnalysis
from sasktask.db.models.analysis import DisputeAnalysis


def to_result(row: DisputeAnalysis) -> DisputeAnalysisResult:
    return DisputeAnalysisResult(
        id=str(row.id),
        dispute_id=str(row.dispute_id),
        analysis_type=row.analysis_type,
        model_identifier=row.model_identifier,
        ai_model=row.ai_model,
        risk_score=row.risk_score,
        confidence_score=row.confidence_score,
        recommendation=row.recommendation,
        reasoning=row.reasoning,
        inconsistencies=list(row.inconsistencies or []),
        suggested_resolution=row.suggested_resolution,
        evidence_summary=row.evidence_summary,
        created_at=row.created_at,
    )


class AnalysisRepository:
    """Sole writer of ``dispute_analysis`` rows. Rows are inserted, never updated."""

    async def record(
        self,
        db: AsyncSession,
        dispute_id: str,
        analysis_type: AnalysisType,
        scored: ScoredAnalysis,
        summary: EvidenceSummary,
    ) -> DisputeAnalysis:
        row = DisputeAnalysis(
            dispute_id=uuid.UUID(dispute_id),
            analysis_type=analysis_type.value,
            model_identifier=scored.model_identifier.value,
            ai_model=scored.ai_model,
            risk_score=scored.risk_score,
            confidence_score=scored.confidence_score,
            recommendation=scored.recommendation.value,
            reasoning=scored.reasoning,
            inconsistencies=list(scored.inconsistencies),
            suggested_resolution=scored.suggested_resolution,
            evidence_summary=summary.model_dump(mode="json"),
        )
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return row

    def history_query(self, dispute_id: uuid.UUID) -> Select:
        return (
            select(DisputeAnalysis)
            .where(DisputeAnalysis.dispute_id == dispute_id)
            .order_by(DisputeAnalysis.created_at.desc())
        )
