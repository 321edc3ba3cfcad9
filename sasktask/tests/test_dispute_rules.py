import pytest

from sasktask.common.enums import Recommendation, ScoringModel
from sasktask.core.disputes.schemas import (
    CheckinSummary,
    ChecklistSummary,
    DisputeContext,
    EvidenceCount,
    EvidenceSummary,
)
from sasktask.core.disputes.strategies import RuleBasedScoringStrategy, detect_inconsistencies


def _summary(evidence=0, checkins=None, checklist=None) -> EvidenceSummary:
    return EvidenceSummary(
        dispute=DisputeContext(reason="poor_quality", details=None, created_at=None),
        evidence_count=EvidenceCount(work_evidence=evidence),
        checkins=checkins or CheckinSummary(),
        checklist=checklist or ChecklistSummary(),
    )


@pytest.fixture
def rules():
    return RuleBasedScoringStrategy()


def test_no_evidence_and_no_checkins_is_insufficient(rules):
    result = rules.evaluate(_summary())

    assert result.recommendation == Recommendation.INSUFFICIENT_EVIDENCE
    assert result.risk_score == 50
    assert result.confidence_score == 20
    assert result.model_identifier == ScoringModel.RULE_BASED
    assert result.ai_model is None


def test_completed_with_all_items_approved_favors_doer(rules):
    result = rules.evaluate(
        _summary(
            evidence=2,
            checkins=CheckinSummary(total=2, started=True, completed=True, locations_verified=2),
            checklist=ChecklistSummary(total_items=3, approved=3),
        )
    )

    assert result.recommendation == Recommendation.FAVOR_DOER
    assert result.confidence_score == 70
    assert result.risk_score == 30
    assert result.inconsistencies == ()
    assert result.suggested_resolution


def test_started_but_not_completed_favors_giver(rules):
    result = rules.evaluate(_summary(checkins=CheckinSummary(total=1, started=True)))

    assert result.recommendation == Recommendation.FAVOR_GIVER
    assert result.risk_score == 60
    assert result.confidence_score == 60


def test_completed_with_rejected_item_escalates(rules):
    result = rules.evaluate(
        _summary(
            evidence=1,
            checkins=CheckinSummary(total=2, started=True, completed=True),
            checklist=ChecklistSummary(total_items=2, approved=1, rejected=1),
        )
    )

    assert result.recommendation == Recommendation.ESCALATE
    assert result.risk_score == 50
    assert result.confidence_score == 40
    assert "1 checklist items were rejected by task giver" in result.inconsistencies


def test_evidence_without_checkins_escalates(rules):
    result = rules.evaluate(_summary(evidence=3))
    assert result.recommendation == Recommendation.ESCALATE


def test_checkins_without_start_do_not_favor_giver(rules):
    # A lone pause check-in proves neither a start nor an end.
    result = rules.evaluate(_summary(checkins=CheckinSummary(total=1)))
    assert result.recommendation == Recommendation.ESCALATE


def test_started_without_work_evidence_is_flagged():
    found = detect_inconsistencies(_summary(checkins=CheckinSummary(total=1, started=True)))
    assert found == ["Task was started according to GPS but no work evidence was uploaded"]


async def test_score_matches_evaluate(rules):
    summary = _summary(checkins=CheckinSummary(total=1, started=True))
    assert await rules.score(summary) == rules.evaluate(summary)
