import uuid
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from sqlalchemy import func, select

from sasktask.common.enums import AnalysisType, CheckinType, ChecklistStatus, Recommendation, ScoringModel
from sasktask.common.exceptions import NotFoundError
from sasktask.common.pagination import PaginationParams
from sasktask.config import settings
from sasktask.core.disputes.collector import EvidenceCollector
from sasktask.core.disputes.service import DisputeAnalysisService, default_strategy
from sasktask.db.models.analysis import DisputeAnalysis
from sasktask.db.models.evidence import ChecklistCompletion, TaskChecklist, TaskCheckin, WorkEvidence
from sasktask.integrations.ai_client import AIClient


async def _row_count(session_factory) -> int:
    async with session_factory() as db:
        return (await db.execute(select(func.count()).select_from(DisputeAnalysis))).scalar()


def _checkin(booking, user, kind: CheckinType) -> TaskCheckin:
    return TaskCheckin(
        booking_id=booking.id,
        user_id=user.id,
        checkin_type=kind.value,
        latitude=52.13,
        longitude=-106.67,
    )


@pytest.fixture
def service(session_factory):
    return DisputeAnalysisService(session_factory)


async def test_no_evidence_persists_insufficient_evidence(service, session_factory, dispute):
    result = await service.analyze(str(dispute.id))

    assert result.dispute_id == str(dispute.id)
    assert result.recommendation == Recommendation.INSUFFICIENT_EVIDENCE
    assert result.confidence_score == 20
    assert result.model_identifier == ScoringModel.RULE_BASED
    assert result.analysis_type == AnalysisType.INITIAL
    assert result.evidence_summary["evidence_count"] == {"dispute_evidence": 0, "work_evidence": 0}
    assert await _row_count(session_factory) == 1


async def test_start_only_checkin_favors_giver(service, add_rows, dispute, booking, task_doer):
    await add_rows(_checkin(booking, task_doer, CheckinType.START))

    result = await service.analyze(str(dispute.id))

    assert result.recommendation == Recommendation.FAVOR_GIVER
    assert result.risk_score == 60
    assert result.confidence_score == 60
    assert result.evidence_summary["checkins"]["locations_verified"] == 1
    assert "Task was started according to GPS but no work evidence was uploaded" in result.inconsistencies


async def test_completed_and_approved_favors_doer(service, add_rows, dispute, booking, task, task_doer):
    item = TaskChecklist(id=uuid.uuid4(), task_id=task.id, title="Sweep floor", requires_photo=True)
    await add_rows(item)
    await add_rows(
        _checkin(booking, task_doer, CheckinType.START),
        _checkin(booking, task_doer, CheckinType.END),
        ChecklistCompletion(
            booking_id=booking.id,
            checklist_id=item.id,
            completed_by=task_doer.id,
            status=ChecklistStatus.APPROVED.value,
        ),
        WorkEvidence(
            booking_id=booking.id,
            uploaded_by=task_doer.id,
            file_url="https://files.test/after.jpg",
            file_name="after.jpg",
            file_type="image/jpeg",
        ),
    )

    result = await service.analyze(str(dispute.id))

    assert result.recommendation == Recommendation.FAVOR_DOER
    assert result.confidence_score == 70
    assert result.risk_score == 30
    assert result.inconsistencies == []
    assert result.evidence_summary["checklist"]["photo_required"] == 1
    assert result.evidence_summary["party_profiles"]["against"]["completed_tasks"] == 3


async def test_unknown_dispute_writes_nothing(service, session_factory, dispute):
    with pytest.raises(NotFoundError):
        await service.analyze(str(uuid.uuid4()))
    with pytest.raises(NotFoundError):
        await service.analyze("not-a-uuid")

    assert await _row_count(session_factory) == 0


async def test_reanalysis_appends_history(service, session_factory, db_session, dispute):
    first = await service.analyze(str(dispute.id))
    second = await service.analyze(str(dispute.id), AnalysisType.REANALYSIS)

    assert first.id != second.id
    assert await _row_count(session_factory) == 2

    items, total = await service.list_analyses(
        dispute.id, PaginationParams(page=1, page_size=20), db_session
    )
    assert total == 2
    assert [a.id for a in items] == [second.id, first.id]
    assert items[0].analysis_type == AnalysisType.REANALYSIS


async def test_history_for_unknown_dispute(service, db_session):
    with pytest.raises(NotFoundError):
        await service.list_analyses(uuid.uuid4(), PaginationParams(page=1, page_size=20), db_session)


async def test_failing_source_is_treated_as_empty(service, add_rows, dispute, booking, task_doer):
    await add_rows(_checkin(booking, task_doer, CheckinType.START))

    with patch.object(
        EvidenceCollector, "_checkins", new=AsyncMock(side_effect=RuntimeError("replica down"))
    ):
        result = await service.analyze(str(dispute.id))

    assert result.evidence_summary["checkins"]["total"] == 0
    assert result.recommendation == Recommendation.INSUFFICIENT_EVIDENCE


async def test_ai_outage_still_persists_rule_based_row(session_factory, monkeypatch, dispute):
    monkeypatch.setattr(settings, "AI_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = AIClient(transport=httpx.MockTransport(handler))
    service = DisputeAnalysisService(session_factory, strategy=default_strategy(client))

    result = await service.analyze(str(dispute.id))

    assert result.model_identifier == ScoringModel.RULE_BASED
    assert result.ai_model is None
    assert await _row_count(session_factory) == 1


async def test_ai_result_records_model(session_factory, monkeypatch, dispute):
    monkeypatch.setattr(settings, "AI_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        content = '{"risk_score": 55, "confidence_score": 61, "recommendation": "split"}'
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    client = AIClient(model="test-model", transport=httpx.MockTransport(handler))
    service = DisputeAnalysisService(session_factory, strategy=default_strategy(client))

    result = await service.analyze(str(dispute.id))

    assert result.model_identifier == ScoringModel.AI_BACKED
    assert result.ai_model == "test-model"
    assert result.recommendation == Recommendation.SPLIT


async def _checklist_rows(add_rows, task, booking, user, statuses):
    items = [TaskChecklist(id=uuid.uuid4(), task_id=task.id, title=f"Step {i}") for i in range(len(statuses))]
    await add_rows(*items)
    await add_rows(
        *[
            ChecklistCompletion(booking_id=booking.id, checklist_id=item.id, completed_by=user.id, status=status)
            for item, status in zip(items, statuses)
        ]
    )


async def test_unknown_checklist_status_counts_as_pending(service, add_rows, dispute, booking, task, task_doer):
    await add_rows(
        _checkin(booking, task_doer, CheckinType.START),
        _checkin(booking, task_doer, CheckinType.END),
    )
    await _checklist_rows(
        add_rows, task, booking, task_doer, [ChecklistStatus.REJECTED.value, "submitted"]
    )

    result = await service.analyze(str(dispute.id))

    checklist = result.evidence_summary["checklist"]
    assert checklist["total_items"] == 2
    assert checklist["rejected"] == 1
    assert checklist["pending"] == 1
    assert result.recommendation == Recommendation.ESCALATE
    assert "1 checklist items were rejected by task giver" in result.inconsistencies


async def test_unknown_checkin_type_is_skipped(service, add_rows, dispute, booking, task, task_doer):
    odd = _checkin(booking, task_doer, CheckinType.START)
    odd.checkin_type = "break"
    await add_rows(_checkin(booking, task_doer, CheckinType.START))
    await add_rows(odd)
    await add_rows(_checkin(booking, task_doer, CheckinType.END))
    await _checklist_rows(add_rows, task, booking, task_doer, [ChecklistStatus.APPROVED.value])

    result = await service.analyze(str(dispute.id))

    checkins = result.evidence_summary["checkins"]
    assert checkins["total"] == 2
    assert checkins["started"] is True
    assert checkins["completed"] is True
    assert result.recommendation == Recommendation.FAVOR_DOER
