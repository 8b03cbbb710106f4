import asyncio
import logging

from envpinn.models import AiAnalysis, Prediction
from envpinn.services.gemini_service import GeminiService
from envpinn.services.openai_service import OpenAIService
from envpinn.services.providers import AnalysisProvider, ProviderResult, ScoreSummary
from envpinn.services.vellum_service import VellumService
from envpinn.storage import Storage

logger = logging.getLogger(__name__)


def default_providers() -> list[AnalysisProvider]:
    return [OpenAIService(), GeminiService(), VellumService()]


def summary_from_prediction(prediction: Prediction, environmental_focus: str) -> ScoreSummary:
    return ScoreSummary(
        algorithm=prediction.algorithm,
        environmental_focus=environmental_focus,
        co2_score=prediction.co2_score,
        heat_score=prediction.heat_score,
        ocean_score=prediction.ocean_score,
        deforest_score=prediction.deforest_score,
    )


async def run_provider_analyses(
    providers: list[AnalysisProvider], summary: ScoreSummary
) -> list[ProviderResult]:
    """Query every provider concurrently; each result is either real text or its fallback."""
    return list(await asyncio.gather(*(p.analyze(summary) for p in providers)))


def save_provider_results(
    storage: Storage, prediction_id: int, results: list[ProviderResult]
) -> list[AiAnalysis]:
    rows = []
    for result in results:
        rows.append(storage.create_ai_analysis(
            prediction_id=prediction_id,
            provider=result.provider,
            analysis=result.text,
            confidence=result.confidence,
            processing_time=result.processing_time,
            is_fallback=result.is_fallback,
        ))
    fallbacks = [r.provider for r in results if r.is_fallback]
    if fallbacks:
        logger.info(f"Prediction {prediction_id}: fallback text stored for {', '.join(fallbacks)}")
    return rows


async def analyze_prediction(
    storage: Storage,
    providers: list[AnalysisProvider],
    prediction: Prediction,
    environmental_focus: str,
) -> list[AiAnalysis]:
    summary = summary_from_prediction(prediction, environmental_focus)
    results = await run_provider_analyses(providers, summary)
    return save_provider_results(storage, prediction.id, results)
