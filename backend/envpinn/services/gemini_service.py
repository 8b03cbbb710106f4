import json
import logging
import threading

from google import genai
from google.genai import types

from envpinn.config import settings, get_gemini_keys
from envpinn.services.providers import AnalysisProvider, ProviderNotConfigured, ScoreSummary

logger = logging.getLogger(__name__)

SCORE_LABELS = {
    "co2": "CO₂ dynamics",
    "heat": "Thermal behavior",
    "ocean": "Marine currents",
    "deforest": "Ecosystem impact",
}

INSIGHT_SYSTEM_PROMPT = """You are an expert environmental scientist analyzing physics-informed neural network predictions.
Provide structured insights in JSON format with the following structure:
{
  "risk_level": "low" | "moderate" | "high",
  "key_findings": ["finding1", "finding2", "finding3"],
  "trend_analysis": "description of temporal trends",
  "physics_consistency": "assessment of physics law adherence",
  "recommendations": ["rec1", "rec2", "rec3"]
}"""

INSIGHT_SCHEMA = {
    "type": "object",
    "properties": {
        "risk_level": {"type": "string", "enum": ["low", "moderate", "high"]},
        "key_findings": {"type": "array", "items": {"type": "string"}, "maxItems": 3},
        "trend_analysis": {"type": "string"},
        "physics_consistency": {"type": "string"},
        "recommendations": {"type": "array", "items": {"type": "string"}, "maxItems": 3},
    },
    "required": ["risk_level", "key_findings", "trend_analysis", "physics_consistency", "recommendations"],
}

FALLBACK_INSIGHT = {
    "risk_level": "moderate",
    "key_findings": [
        "Analysis temporarily unavailable",
        "PINN constraints remain active",
        "Physics laws enforced",
    ],
    "trend_analysis": "Unable to analyze trends at this time",
    "physics_consistency": "Conservation laws maintained in PINN architecture",
    "recommendations": ["Monitor system status", "Retry analysis", "Check data quality"],
}


class GeminiService(AnalysisProvider):
    name = "gemini"
    fallback_text = (
        "Gemini analysis temporarily unavailable. The PINN models maintain high accuracy through "
        "physics-informed constraints and conservation law enforcement."
    )

    def __init__(self, api_keys: list[str] = None, model: str = None,
                 insight_model: str = None, timeout: float = None):
        super().__init__(timeout=timeout if timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS)
        self.api_keys = api_keys if api_keys is not None else get_gemini_keys()
        self.model = model or settings.GEMINI_MODEL
        self.insight_model = insight_model or settings.GEMINI_INSIGHT_MODEL
        self._key_index = 0
        self._key_lock = threading.Lock()

    def _next_key(self) -> str:
        """Round-robin key selection (thread-safe)."""
        if not self.api_keys:
            raise ProviderNotConfigured("GEMINI_API_KEY is not set")
        with self._key_lock:
            idx = self._key_index % len(self.api_keys)
            self._key_index += 1
        return self.api_keys[idx]

    def _http_options(self):
        if self.timeout is None:
            return None
        return types.HttpOptions(timeout=int(self.timeout * 1000))

    def build_prompt(self, summary: ScoreSummary) -> str:
        return f"""Environmental prediction analysis using {summary.algorithm}:

Prediction confidence scores: {summary.labelled(SCORE_LABELS)}
Primary focus: {summary.environmental_focus}

Provide expert insights on:
1. Environmental system stability based on physics-informed predictions
2. Critical thresholds and tipping points
3. Interconnected environmental processes
4. Model confidence assessment through conservation law compliance
5. Early warning system recommendations

Emphasize physics-based understanding and multi-scale environmental interactions. Limit to 150 words."""

    async def complete(self, prompt: str) -> str:
        client = genai.Client(api_key=self._next_key())
        response = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=0.3,
                max_output_tokens=200,
                http_options=self._http_options(),
            ),
        )
        return response.text or "Environmental analysis unavailable"

    def confidence(self, summary: ScoreSummary) -> float:
        if not summary.present_scores():
            return 0.45
        avg, std = summary.mean_and_std()
        base = min(0.90, max(0.35, avg / 100))
        consistency_bonus = max(0.0, (20 - std) / 100)
        return round(base + consistency_bonus, 2)

    async def generate_structured_insight(self, summary: ScoreSummary, temporal_data: list = None) -> dict:
        """Ask Gemini for a JSON risk assessment; falls back to a fixed insight on any error."""
        try:
            client = genai.Client(api_key=self._next_key())
            response = await client.aio.models.generate_content(
                model=self.insight_model,
                contents=_build_insight_prompt(summary, temporal_data),
                config=types.GenerateContentConfig(
                    system_instruction=INSIGHT_SYSTEM_PROMPT,
                    response_mime_type="application/json",
                    response_schema=INSIGHT_SCHEMA,
                    http_options=self._http_options(),
                ),
            )
            if not response.text:
                raise RuntimeError("Empty response from Gemini")
            insight = _parse_response(response.text)
            return {"insight": insight, "confidence": self.confidence(summary), "fallback": False}
        except Exception as e:
            logger.warning(f"Gemini structured insight failed: {e!r}")
            return {"insight": dict(FALLBACK_INSIGHT), "confidence": 0.0, "fallback": True}


def _build_insight_prompt(summary: ScoreSummary, temporal_data: list = None) -> str:
    scores = summary.labelled({
        "co2": "CO₂", "heat": "Heat", "ocean": "Ocean", "deforest": "Deforestation",
    })
    temporal_summary = ""
    if temporal_data:
        temporal_summary = f"\nTemporal data available: {len(temporal_data)} days of forecasts"

    return f"""Analyze {summary.algorithm} environmental predictions:

Scores: {scores}{temporal_summary}

Generate structured environmental assessment focusing on physics-informed insights and actionable recommendations."""


def _parse_response(text: str) -> dict:
    """Parse Gemini response, handling potential markdown code blocks."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = lines[1:]  # remove opening ```json
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return json.loads(cleaned)
