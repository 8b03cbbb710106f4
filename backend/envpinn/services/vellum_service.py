import logging

import httpx

from envpinn.config import settings
from envpinn.services.providers import AnalysisProvider, ProviderNotConfigured, ScoreSummary

logger = logging.getLogger(__name__)

SCORE_LABELS = {
    "co2": "CO₂",
    "heat": "Heat",
    "ocean": "Ocean",
    "deforest": "Deforestation",
}


class VellumService(AnalysisProvider):
    """Completion-style HTTP API; the request and response shapes are plain JSON."""

    name = "vellum"
    fallback_text = "Environmental analysis temporarily unavailable. Please try again later."

    def __init__(self, api_key: str = None, base_url: str = None, model: str = None,
                 timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        super().__init__(timeout=timeout if timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS)
        self.api_key = api_key if api_key is not None else settings.VELLUM_API_KEY
        self.base_url = (base_url or settings.VELLUM_BASE_URL).rstrip("/")
        self.model = model or settings.VELLUM_MODEL
        self._transport = transport

    def build_prompt(self, summary: ScoreSummary) -> str:
        return f"""Analyze environmental prediction results using {summary.algorithm} algorithm focused on {summary.environmental_focus}.

Prediction scores: {summary.labelled(SCORE_LABELS)}

Provide a concise summary of:
1. Environmental stability assessment
2. Key risk factors
3. Confidence in predictions
4. Recommended monitoring focus

Limit to 150 words, use scientific terminology appropriate for environmental researchers."""

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ProviderNotConfigured("VELLUM_API_KEY is not set")
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "prompt": prompt,
                    "max_tokens": 200,
                    "temperature": 0.3,
                    "stop": ["\n\n"],
                },
            )
            response.raise_for_status()
            data = response.json()

        choices = data.get("choices") or []
        text = (choices[0].get("text") or "").strip() if choices else ""
        return text or "Analysis unavailable"

    def confidence(self, summary: ScoreSummary) -> float:
        if not summary.present_scores():
            return 0.0
        avg, std = summary.mean_and_std()
        return min(0.95, (avg / 100) * (1 - std / 100))
