import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from envpinn.services import gemini_service
from envpinn.services.gemini_service import FALLBACK_INSIGHT, GeminiService, _parse_response
from envpinn.services.openai_service import OpenAIService
from envpinn.services.providers import AnalysisFallback, AnalysisOk, ScoreSummary
from envpinn.services.vellum_service import VellumService

EMPTY = ScoreSummary(algorithm="ClimODE", environmental_focus="carbon-dioxide")
PAIR = ScoreSummary(algorithm="ClimODE", environmental_focus="carbon-dioxide", co2_score=80.0, heat_score=90.0)
SINGLE = ScoreSummary(algorithm="PCNN-TSA", environmental_focus="ocean-currents", ocean_score=60.0)


# ── Score summary ───────────────────────────────────────────────

def test_labelled_keeps_zero_and_skips_missing() -> None:
    summary = ScoreSummary(algorithm="x", environmental_focus="y", co2_score=0.0, ocean_score=91.5)
    assert summary.labelled({"co2": "CO2", "heat": "Heat", "ocean": "Ocean", "deforest": "D"}) == (
        "CO2: 0.0%, Ocean: 91.5%"
    )


def test_mean_and_std() -> None:
    avg, std = PAIR.mean_and_std()
    assert avg == pytest.approx(85.0)
    assert std == pytest.approx(5.0)


# ── Confidence heuristics ───────────────────────────────────────

def test_openai_confidence() -> None:
    service = OpenAIService(api_key="")
    assert service.confidence(EMPTY) == 0.5
    assert service.confidence(PAIR) == pytest.approx(0.8)
    assert service.confidence(SINGLE) == pytest.approx(0.6)


def test_gemini_confidence() -> None:
    service = GeminiService(api_keys=[])
    assert service.confidence(EMPTY) == 0.45
    assert service.confidence(PAIR) == pytest.approx(1.0)
    assert service.confidence(SINGLE) == pytest.approx(0.8)


def test_vellum_confidence() -> None:
    service = VellumService(api_key="")
    assert service.confidence(EMPTY) == 0.0
    assert service.confidence(PAIR) == pytest.approx(0.8075)
    assert service.confidence(SINGLE) == pytest.approx(0.6)


# ── Fallback behaviour ──────────────────────────────────────────

@pytest.mark.parametrize(
    "service",
    [OpenAIService(api_key=""), GeminiService(api_keys=[]), VellumService(api_key="")],
    ids=["openai", "gemini", "vellum"],
)
def test_missing_key_gives_fallback(service) -> None:
    result = asyncio.run(service.analyze(PAIR))

    assert isinstance(result, AnalysisFallback)
    assert result.is_fallback is True
    assert result.confidence == 0.0
    assert result.provider == service.name
    assert result.text == service.fallback_text
    assert "not set" in result.error


def test_exception_in_provider_gives_fallback(make_provider) -> None:
    provider = make_provider("openai", error=ConnectionError("boom"))
    result = asyncio.run(provider.analyze(PAIR))

    assert isinstance(result, AnalysisFallback)
    assert result.error == "boom"
    assert result.text == "openai fallback"


def test_timeout_gives_fallback(make_provider) -> None:
    class Slow(make_provider):
        async def complete(self, prompt):
            await asyncio.sleep(1)
            return "late"

    provider = Slow("vellum")
    provider.timeout = 0.01
    result = asyncio.run(provider.analyze(PAIR))

    assert isinstance(result, AnalysisFallback)
    assert result.error == "TimeoutError"


def test_success_is_analysis_ok(make_provider) -> None:
    provider = make_provider("gemini", text="stable", confidence_value=0.77)
    result = asyncio.run(provider.analyze(PAIR))

    assert isinstance(result, AnalysisOk)
    assert result.is_fallback is False
    assert result.text == "stable"
    assert result.confidence == 0.77
    assert result.processing_time >= 0
    assert provider.prompts == ["ClimODE / carbon-dioxide"]


# ── OpenAI ──────────────────────────────────────────────────────

def test_openai_complete_uses_chat_completions() -> None:
    service = OpenAIService(api_key="sk-test", model="gpt-4o")
    completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="Stable CO2."))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion)
    service._client = client

    result = asyncio.run(service.analyze(PAIR))

    assert isinstance(result, AnalysisOk)
    assert result.text == "Stable CO2."
    assert result.confidence == pytest.approx(0.8)
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["max_tokens"] == 200
    assert kwargs["temperature"] == 0.3
    assert "CO₂ flow: 80.0%, Heat flux: 90.0%" in kwargs["messages"][1]["content"]


def test_openai_empty_content() -> None:
    service = OpenAIService(api_key="sk-test")
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
    service._client = client

    result = asyncio.run(service.analyze(PAIR))
    assert result.text == "Analysis unavailable"


# ── Gemini ──────────────────────────────────────────────────────

def _gemini_client(text):
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=SimpleNamespace(text=text))
    return client


def test_gemini_rotates_keys() -> None:
    service = GeminiService(api_keys=["k1", "k2"], model="gemini-2.5-flash")
    with patch.object(gemini_service.genai, "Client", return_value=_gemini_client("ok")) as factory:
        first = asyncio.run(service.analyze(PAIR))
        asyncio.run(service.analyze(PAIR))
        asyncio.run(service.analyze(PAIR))

    assert isinstance(first, AnalysisOk)
    assert first.text == "ok"
    keys = [c.kwargs["api_key"] for c in factory.call_args_list]
    assert keys == ["k1", "k2", "k1"]


def test_structured_insight_success() -> None:
    payload = {
        "risk_level": "low",
        "key_findings": ["a"],
        "trend_analysis": "flat",
        "physics_consistency": "ok",
        "recommendations": ["watch"],
    }
    service = GeminiService(api_keys=["k1"])
    client = _gemini_client("```json\n" + json.dumps(payload) + "\n```")
    with patch.object(gemini_service.genai, "Client", return_value=client):
        result = asyncio.run(service.generate_structured_insight(PAIR, [{"day": 1}, {"day": 2}]))

    assert result["fallback"] is False
    assert result["insight"] == payload
    assert result["confidence"] == pytest.approx(1.0)
    prompt = client.aio.models.generate_content.call_args.kwargs["contents"]
    assert "2 days of forecasts" in prompt


def test_structured_insight_fallback_without_keys() -> None:
    result = asyncio.run(GeminiService(api_keys=[]).generate_structured_insight(PAIR))

    assert result["fallback"] is True
    assert result["confidence"] == 0.0
    assert result["insight"] == FALLBACK_INSIGHT


def test_parse_response_plain_json() -> None:
    assert _parse_response('  {"risk_level": "high"} ') == {"risk_level": "high"}


# ── Vellum ──────────────────────────────────────────────────────

def test_vellum_posts_completion_request() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"text": "  Ocean flow steady.  "}]})

    service = VellumService(
        api_key="v-key", base_url="https://vellum.test/v1/", model="m1",
        transport=httpx.MockTransport(handler),
    )
    result = asyncio.run(service.analyze(SINGLE))

    assert isinstance(result, AnalysisOk)
    assert result.text == "Ocean flow steady."
    assert captured["url"] == "https://vellum.test/v1/completions"
    assert captured["auth"] == "Bearer v-key"
    assert captured["body"]["model"] == "m1"
    assert captured["body"]["max_tokens"] == 200
    assert "Ocean: 60.0%" in captured["body"]["prompt"]


def test_vellum_http_error_gives_fallback() -> None:
    service = VellumService(
        api_key="v-key", base_url="https://vellum.test/v1",
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )
    result = asyncio.run(service.analyze(SINGLE))

    assert isinstance(result, AnalysisFallback)
    assert result.text == "Environmental analysis temporarily unavailable. Please try again later."
