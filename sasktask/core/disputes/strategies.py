"""Scoring strategies for dispute analysis.

``RuleBasedScoringStrategy`` is a deterministic decision tree over the
evidence summary. ``AIScoringStrategy`` asks a chat model for the same
fields and fills anything missing from the rule-based result.
``FallbackScoringStrategy`` composes the two: the AI path is tried first
and any failure, timeout or unusable reply yields the rule-based result.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from sasktask.common.enums import Recommendation, ScoringModel
from sasktask.common.exceptions import AIResponseParseError
from sasktask.common.logging import get_logger
from sasktask.core.disputes.parsing import parse_analysis_response
from sasktask.core.disputes.schemas import EvidenceSummary, ParseFailure, ScoredAnalysis
from sasktask.integrations.ai_client import AIClient

logger = get_logger("disputes.strategies")


class ScoringStrategy(ABC):
    identifier: ScoringModel

    @property
    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
        ...


def detect_inconsistencies(summary: EvidenceSummary) -> list[str]:
    found = []
    if summary.checkins.started and not summary.has_evidence:
        found.append("Task was started according to GPS but no work evidence was uploaded")
    if summary.checklist.rejected > 0:
        found.append(f"{summary.checklist.rejected} checklist items were rejected by task giver")
    return found


# ---------------------------------------------------------------------------
# Rule-based
# ---------------------------------------------------------------------------


class RuleBasedScoringStrategy(ScoringStrategy):
    identifier = ScoringModel.RULE_BASED

    async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
        return self.evaluate(summary)

    def evaluate(self, summary: EvidenceSummary) -> ScoredAnalysis:
        checkins = summary.checkins

        if not summary.has_evidence and not summary.has_checkins:
            recommendation = Recommendation.INSUFFICIENT_EVIDENCE
            risk, confidence = 50, 20
            reasoning = "Insufficient evidence provided by either party to make a determination."
            resolution = "Request photos, receipts or check-ins from both parties before deciding."
        elif checkins.completed and summary.checklist.all_approved:
            recommendation = Recommendation.FAVOR_DOER
            risk, confidence = 30, 70
            reasoning = (
                "Task doer has GPS-verified check-ins showing task completion "
                "and all checklist items are approved."
            )
            resolution = "Release the escrowed payment to the task doer."
        elif checkins.started and not checkins.completed:
            recommendation = Recommendation.FAVOR_GIVER
            risk, confidence = 60, 60
            reasoning = "GPS check-ins show task was started but not completed by the doer."
            resolution = "Refund the task giver for the uncompleted work."
        else:
            recommendation = Recommendation.ESCALATE
            risk, confidence = 50, 40
            reasoning = "Mixed evidence requires human review for fair resolution."
            resolution = "Assign the dispute to a moderator for manual review."

        return ScoredAnalysis(
            model_identifier=self.identifier,
            risk_score=risk,
            confidence_score=confidence,
            recommendation=recommendation,
            reasoning=reasoning,
            inconsistencies=tuple(detect_inconsistencies(summary)),
            suggested_resolution=resolution,
        )


# ---------------------------------------------------------------------------
# AI-backed
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are an expert dispute resolution analyst for a task marketplace called SaskTask. "
    "You review disagreements between task givers (who post and pay for tasks) and task doers "
    "(who perform them) and recommend fair, evidence-based outcomes.\n\n"
    "Evaluate the evidence objectively, weigh each party's history and reliability, point out "
    "inconsistencies or red flags, and recommend a resolution. Be concise and factual."
)

_RESPONSE_FORMAT = """Respond with a single JSON object in this format:
{
  "risk_score": <0-100, where 100 is highest risk of fraud>,
  "confidence_score": <0-100, confidence in your analysis>,
  "recommendation": "<favor_giver|favor_doer|split|escalate|insufficient_evidence>",
  "reasoning": "<clear explanation of your analysis>",
  "inconsistencies": ["<list of any inconsistencies found>"],
  "suggested_resolution": "<specific action to resolve this dispute>"
}"""


def _na(value) -> str:
    return "N/A" if value is None else str(value)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def build_user_prompt(summary: EvidenceSummary) -> str:
    """Render the summary as a prompt. Only summary fields are included."""
    d = summary.dispute
    lines = [
        "Analyze this dispute and provide a recommendation.",
        "",
        "DISPUTE DETAILS:",
        f"- Reason: {d.reason}",
        f"- Description: {d.details or 'None given'}",
        f"- Filed: {d.created_at.isoformat() if d.created_at else 'N/A'}",
        "",
        "TASK INFO:",
    ]
    if summary.task is not None:
        t = summary.task
        lines += [
            f"- Title: {t.title}",
            f"- Amount: ${_na(t.pay_amount)}",
            f"- Scheduled: {t.scheduled_date.isoformat() if t.scheduled_date else 'N/A'}",
        ]
    else:
        lines.append("No task info available")

    if summary.booking is not None:
        lines += [
            "",
            "BOOKING:",
            f"- Status: {_na(summary.booking.status)}",
            f"- Deposit paid: {_yes_no(summary.booking.deposit_paid)}",
        ]

    raiser = summary.party_profiles.raiser
    against = summary.party_profiles.against
    lines += [
        "",
        "EVIDENCE SUMMARY:",
        f"- Dispute evidence files: {summary.evidence_count.dispute_evidence}",
        f"- Work evidence files: {summary.evidence_count.work_evidence}",
        "",
        "GPS CHECK-INS:",
        f"- Total check-ins: {summary.checkins.total}",
        f"- Task started: {_yes_no(summary.checkins.started)}",
        f"- Task completed: {_yes_no(summary.checkins.completed)}",
        f"- Locations verified: {summary.checkins.locations_verified}",
        "",
        "CHECKLIST STATUS:",
        f"- Total items: {summary.checklist.total_items}",
        f"- Approved: {summary.checklist.approved}",
        f"- Rejected: {summary.checklist.rejected}",
        f"- Pending: {summary.checklist.pending}",
        f"- Requiring photo proof: {summary.checklist.photo_required}",
        "",
        "PARTY TRUST SCORES:",
        "- Dispute raiser: "
        + (f"Trust {_na(raiser.trust_score)}, Rating {_na(raiser.rating)}" if raiser else "No profile"),
        "- Accused party: "
        + (f"Trust {_na(against.trust_score)}, Rating {_na(against.rating)}" if against else "No profile"),
        "",
        f"AUDIT TRAIL: {summary.audit_events} events recorded",
        "",
        _RESPONSE_FORMAT,
    ]
    return "\n".join(lines)


def _merge_unique(*groups) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


class AIScoringStrategy(ScoringStrategy):
    identifier = ScoringModel.AI_BACKED

    def __init__(self, client: AIClient, defaults: RuleBasedScoringStrategy | None = None) -> None:
        self.client = client
        self.defaults = defaults or RuleBasedScoringStrategy()

    @property
    def is_available(self) -> bool:
        return self.client.is_configured

    async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
        """Raises ``ExternalServiceError`` or ``AIResponseParseError`` on failure."""
        reply = await self.client.chat(SYSTEM_PROMPT, build_user_prompt(summary))

        parsed = parse_analysis_response(reply)
        if isinstance(parsed, ParseFailure):
            raise AIResponseParseError(parsed.reason)

        base = self.defaults.evaluate(summary)
        return ScoredAnalysis(
            model_identifier=self.identifier,
            ai_model=self.client.model,
            risk_score=parsed.risk_score if parsed.risk_score is not None else base.risk_score,
            confidence_score=(
                parsed.confidence_score if parsed.confidence_score is not None else base.confidence_score
            ),
            recommendation=parsed.recommendation or base.recommendation,
            reasoning=parsed.reasoning or base.reasoning,
            inconsistencies=_merge_unique(parsed.inconsistencies or (), base.inconsistencies),
            suggested_resolution=parsed.suggested_resolution or base.suggested_resolution,
        )


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


class FallbackScoringStrategy(ScoringStrategy):
    def __init__(
        self,
        primary: ScoringStrategy,
        fallback: ScoringStrategy,
        timeout: float | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.timeout = timeout

    @property
    def identifier(self) -> ScoringModel:
        return self.primary.identifier

    async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
        if not self.primary.is_available:
            return await self.fallback.score(summary)

        try:
            return await asyncio.wait_for(self.primary.score(summary), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "%s scoring exceeded %.0fs, using %s",
                self.primary.identifier.value,
                self.timeout,
                self.fallback.identifier.value,
            )
        except Exception as e:
            logger.warning(
                "%s scoring failed, using %s: %s",
                self.primary.identifier.value,
                self.fallback.identifier.value,
                getattr(e, "detail", e),
            )
        return await self.fallback.score(summary)
