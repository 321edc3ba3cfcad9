import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sasktask.common.enums import AnalysisType
from sasktask.common.exceptions import NotFoundError
from sasktask.common.logging import get_logger
from sasktask.common.pagination import PaginationParams, paginate
from sasktask.config import settings
from sasktask.core.disputes.collector import EvidenceCollector
from sasktask.core.disputes.normalizer import build_evidence_summary
from sasktask.core.disputes.repository import AnalysisRepository, to_result
from sasktask.core.disputes.schemas import DisputeAnalysisResult
from sasktask.core.disputes.strategies import (
    AIScoringStrategy,
    FallbackScoringStrategy,
    RuleBasedScoringStrategy,
    ScoringStrategy,
)
from sasktask.db.models.dispute import Dispute
from sasktask.integrations.ai_client import AIClient

logger = get_logger("disputes.service")

# Headroom over the HTTP timeout so the client's own error surfaces first.
_STRATEGY_GRACE_SECONDS = 5.0


def default_strategy(client: AIClient | None = None) -> ScoringStrategy:
    rules = RuleBasedScoringStrategy()
    return FallbackScoringStrategy(
        primary=AIScoringStrategy(client or AIClient(), defaults=rules),
        fallback=rules,
        timeout=settings.AI_TIMEOUT_SECONDS + _STRATEGY_GRACE_SECONDS,
    )


class DisputeAnalysisService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        strategy: ScoringStrategy | None = None,
        repository: AnalysisRepository | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.collector = EvidenceCollector(session_factory)
        self.strategy = strategy or default_strategy()
        self.repository = repository or AnalysisRepository()

    async def analyze(
        self, dispute_id: str, analysis_type: AnalysisType = AnalysisType.INITIAL
    ) -> DisputeAnalysisResult:
        """Score a dispute and append the result to its analysis history.

        Raises ``NotFoundError`` when the dispute does not exist; nothing is
        written in that case. Evidence sources that fail to load and an
        unavailable AI backend both degrade the analysis instead of failing it.
        """
        collected = await self.collector.collect(dispute_id)
        summary = build_evidence_summary(collected)
        scored = await self.strategy.score(summary)

        async with self._session_factory() as db:
            try:
                row = await self.repository.record(db, collected.dispute.id, analysis_type, scored, summary)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Dispute %s analyzed (%s, %s): %s risk=%d confidence=%d",
            collected.dispute.id,
            analysis_type.value,
            scored.model_identifier.value,
            scored.recommendation.value,
            scored.risk_score,
            scored.confidence_score,
        )
        return to_result(row)

    async def list_analyses(
        self, dispute_id: uuid.UUID, params: PaginationParams, db: AsyncSession
    ) -> tuple[list[DisputeAnalysisResult], int]:
        exists = await db.execute(
            select(Dispute.id).where(Dispute.id == dispute_id, Dispute.is_deleted.is_(False))
        )
        if exists.scalar_one_or_none() is None:
            raise NotFoundError("Dispute", str(dispute_id))

        rows, total = await paginate(db, self.repository.history_query(dispute_id), params)
        return [to_result(r) for r in rows], total
