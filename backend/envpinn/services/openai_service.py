import logging

from openai import AsyncOpenAI

from envpinn.config import settings
from envpinn.services.providers import AnalysisProvider, ProviderNotConfigured, ScoreSummary

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert environmental scientist specializing in physics-informed neural networks "
    "and climate modeling. Analyze prediction results with scientific rigor, focusing on physical "
    "consistency and environmental implications. Provide insights that would be valuable for "
    "environmental researchers and policy makers."
)

SCORE_LABELS = {
    "co2": "CO₂ flow",
    "heat": "Heat flux",
    "ocean": "Ocean currents",
    "deforest": "Deforestation risk",
}


class OpenAIService(AnalysisProvider):
    name = "openai"
    fallback_text = (
        "OpenAI analysis temporarily unavailable. The physics-informed predictions remain valid "
        "based on embedded conservation laws and boundary conditions."
    )

    def __init__(self, api_key: str = None, model: str = None, timeout: float = None):
        super().__init__(timeout=timeout if timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS)
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self._client = None

    def _get_client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise ProviderNotConfigured("OPENAI_API_KEY is not set")
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def build_prompt(self, summary: ScoreSummary) -> str:
        return f"""Analyze environmental prediction results from {summary.algorithm} algorithm:

Prediction scores: {summary.labelled(SCORE_LABELS)}
Environmental focus: {summary.environmental_focus}

Provide scientific analysis covering:
1. Physical interpretation of prediction scores
2. Environmental stability assessment based on physics-informed constraints
3. Key risk factors and early warning indicators
4. Confidence in predictions based on conservation law adherence
5. Recommended monitoring priorities

Focus on scientific accuracy and physics-based reasoning. Limit to 150 words."""

    async def complete(self, prompt: str) -> str:
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=200,
            temperature=0.3,
        )
        content = response.choices[0].message.content if response.choices else None
        return content or "Analysis unavailable"

    def confidence(self, summary: ScoreSummary) -> float:
        """Higher mean and lower spread give higher confidence, within 0.3-0.95."""
        if not summary.present_scores():
            return 0.5
        avg, std = summary.mean_and_std()
        base = min(0.95, max(0.3, avg / 100))
        penalty = min(0.3, std / 100)
        return round(base - penalty, 2)
