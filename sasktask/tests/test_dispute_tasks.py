import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from sasktask.common.enums import AnalysisType, Recommendation, ScoringModel
from sasktask.core.disputes.schemas import DisputeAnalysisResult
from sasktask.tasks.dispute_tasks import analyze_dispute


def _result(dispute_id: str) -> DisputeAnalysisResult:
    return DisputeAnalysisResult(
        id=str(uuid.uuid4()),
        dispute_id=dispute_id,
        analysis_type=AnalysisType.INITIAL,
        model_identifier=ScoringModel.RULE_BASED,
        ai_model=None,
        risk_score=50,
        confidence_score=20,
        recommendation=Recommendation.INSUFFICIENT_EVIDENCE,
        reasoning="Insufficient evidence",
        inconsistencies=[],
        suggested_resolution="Request evidence",
        evidence_summary={},
        created_at=datetime.now(timezone.utc),
    )


def test_analyze_dispute_task_runs_service():
    dispute_id = str(uuid.uuid4())
    mock_analyze = AsyncMock(return_value=_result(dispute_id))

    with patch("sasktask.core.disputes.service.DisputeAnalysisService.analyze", mock_analyze):
        payload = analyze_dispute.run(dispute_id, "reanalysis")

    mock_analyze.assert_awaited_once_with(dispute_id, AnalysisType.REANALYSIS)
    assert payload["dispute_id"] == dispute_id
    assert payload["recommendation"] == "insufficient_evidence"


def test_analyze_dispute_task_propagates_errors():
    mock_analyze = AsyncMock(side_effect=RuntimeError("database unavailable"))

    with patch("sasktask.core.disputes.service.DisputeAnalysisService.analyze", mock_analyze):
        with pytest.raises(RuntimeError):
            analyze_dispute.run(str(uuid.uuid4()))


def test_task_is_routed_to_disputes_queue():
    from sasktask.tasks.celery_app import app

    routes = app.conf.task_routes
    assert routes["sasktask.tasks.dispute_tasks.*"] == {"queue": "disputes"}
    assert analyze_dispute.name == "sasktask.tasks.dispute_tasks.analyze_dispute"
