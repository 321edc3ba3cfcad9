import asyncio

from sasktask.common.logging import get_logger
from sasktask.tasks.celery_app import app

logger = get_logger("tasks.dispute")


def _run_async(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@app.task(name="sasktask.tasks.dispute_tasks.analyze_dispute")
def analyze_dispute(dispute_id: str, analysis_type: str = "initial"):
    """Run a dispute analysis out of band, e.g. right after a dispute is filed."""
    logger.info("Analyzing dispute %s (%s)", dispute_id, analysis_type)

    async def _analyze():
        from sasktask.common.enums import AnalysisType
        from sasktask.core.disputes.service import DisputeAnalysisService
        from sasktask.db import session

        try:
            service = DisputeAnalysisService(session.async_session_factory)
            result = await service.analyze(dispute_id, AnalysisType(analysis_type))
            logger.info(
                "Dispute %s analysis %s stored: %s",
                dispute_id,
                result.id,
                result.recommendation.value,
            )
            return result.model_dump(mode="json")
        except Exception as e:
            logger.error("Failed to analyze dispute %s: %s", dispute_id, e)
            raise

    return _run_async(_analyze())
