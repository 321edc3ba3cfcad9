import asyncio
import json

import httpx
import pytest

from sasktask.common.enums import Recommendation, ScoringModel
from sasktask.common.exceptions import AIResponseParseError, ExternalServiceError
from sasktask.config import settings
from sasktask.core.disputes.schemas import (
    CheckinSummary,
    DisputeContext,
    EvidenceSummary,
    ScoredAnalysis,
)
from sasktask.core.disputes.strategies import (
    AIScoringStrategy,
    FallbackScoringStrategy,
    RuleBasedScoringStrategy,
    ScoringStrategy,
    build_user_prompt,
)
from sasktask.integrations.ai_client import AIClient

SUMMARY = EvidenceSummary(
    dispute=DisputeContext(reason="no_show", details="Never arrived", created_at=None),
    checkins=CheckinSummary(total=1, started=True),
)


def _reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _client(handler) -> AIClient:
    return AIClient(base_url="https://ai.test/v1", model="test-model", transport=httpx.MockTransport(handler))


def _fallback(client: AIClient, timeout: float | None = None) -> FallbackScoringStrategy:
    rules = RuleBasedScoringStrategy()
    return FallbackScoringStrategy(AIScoringStrategy(client, defaults=rules), rules, timeout=timeout)


@pytest.fixture
def ai_configured(monkeypatch):
    monkeypatch.setattr(settings, "AI_API_KEY", "test-key")


async def test_ai_reply_is_used(ai_configured):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return _reply(
            'Sure. {"risk_score": 81, "confidence_score": 64, "recommendation": "favor_giver",'
            ' "reasoning": "No end check-in", "inconsistencies": ["Photos missing"],'
            ' "suggested_resolution": "Refund in full"}'
        )

    result = await _fallback(_client(handler)).score(SUMMARY)

    assert result.model_identifier == ScoringModel.AI_BACKED
    assert result.ai_model == "test-model"
    assert result.risk_score == 81
    assert result.recommendation == Recommendation.FAVOR_GIVER
    assert result.inconsistencies[0] == "Photos missing"
    assert "Task was started according to GPS but no work evidence was uploaded" in result.inconsistencies
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["temperature"] == settings.AI_TEMPERATURE
    assert seen["body"]["messages"][0]["role"] == "system"


async def test_missing_ai_fields_take_rule_values(ai_configured):
    result = await AIScoringStrategy(_client(lambda r: _reply('{"risk_score": 90}'))).score(SUMMARY)
    rules = RuleBasedScoringStrategy().evaluate(SUMMARY)

    assert result.risk_score == 90
    assert result.confidence_score == rules.confidence_score
    assert result.recommendation == rules.recommendation
    assert result.suggested_resolution == rules.suggested_resolution


async def test_network_failure_falls_back_to_rules(ai_configured):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _fallback(_client(handler)).score(SUMMARY)

    assert result.model_identifier == ScoringModel.RULE_BASED
    assert result.recommendation == Recommendation.FAVOR_GIVER


async def test_server_error_falls_back_to_rules(ai_configured):
    result = await _fallback(_client(lambda r: httpx.Response(503))).score(SUMMARY)
    assert result.model_identifier == ScoringModel.RULE_BASED


async def test_unparseable_reply_falls_back_to_rules(ai_configured):
    result = await _fallback(_client(lambda r: _reply("I'd rather not say."))).score(SUMMARY)
    assert result.model_identifier == ScoringModel.RULE_BASED


async def test_unconfigured_client_never_calls_out():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("AI backend should not be contacted")

    strategy = _fallback(_client(handler))

    assert strategy.primary.is_available is False
    result = await strategy.score(SUMMARY)
    assert result.model_identifier == ScoringModel.RULE_BASED


async def test_slow_primary_times_out():
    class SlowStrategy(ScoringStrategy):
        identifier = ScoringModel.AI_BACKED

        async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
            await asyncio.sleep(5)
            raise AssertionError("should have been cancelled")

    strategy = FallbackScoringStrategy(SlowStrategy(), RuleBasedScoringStrategy(), timeout=0.01)
    result = await strategy.score(SUMMARY)

    assert result.model_identifier == ScoringModel.RULE_BASED


async def test_ai_strategy_raises_on_bad_reply(ai_configured):
    with pytest.raises(AIResponseParseError):
        await AIScoringStrategy(_client(lambda r: _reply("no json here"))).score(SUMMARY)


async def test_client_maps_missing_content(ai_configured):
    client = _client(lambda r: httpx.Response(200, json={"choices": []}))
    with pytest.raises(ExternalServiceError) as exc:
        await client.chat("system", "user")
    assert exc.value.status_code == 502


def test_prompt_only_uses_summary_fields():
    prompt = build_user_prompt(SUMMARY)

    assert "- Reason: no_show" in prompt
    assert "- Task started: Yes" in prompt
    assert "- Task completed: No" in prompt
    assert "No task info available" in prompt
    assert prompt == build_user_prompt(SUMMARY)


async def test_nested_fallback_reports_primary_identifier():
    class SlowStrategy(ScoringStrategy):
        identifier = ScoringModel.AI_BACKED

        async def score(self, summary: EvidenceSummary) -> ScoredAnalysis:
            await asyncio.sleep(5)
            raise AssertionError("should have been cancelled")

    inner = FallbackScoringStrategy(SlowStrategy(), RuleBasedScoringStrategy())
    outer = FallbackScoringStrategy(inner, RuleBasedScoringStrategy(), timeout=0.01)

    assert outer.identifier == ScoringModel.AI_BACKED
    result = await outer.score(SUMMARY)
    assert result.model_identifier == ScoringModel.RULE_BASED
