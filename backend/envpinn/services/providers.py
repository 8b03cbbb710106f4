"""Common shape for the text-generation providers.

A provider call never raises: it returns either ``AnalysisOk`` or
``AnalysisFallback`` so callers can tell real commentary from placeholder text.
"""
from __future__ import annotations

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class ScoreSummary:
    algorithm: str
    environmental_focus: str
    co2_score: Optional[float] = None
    heat_score: Optional[float] = None
    ocean_score: Optional[float] = None
    deforest_score: Optional[float] = None

    def present_scores(self) -> list[float]:
        return [
            s for s in (self.co2_score, self.heat_score, self.ocean_score, self.deforest_score)
            if s is not None
        ]

    def mean_and_std(self) -> tuple[float, float]:
        scores = self.present_scores()
        avg = sum(scores) / len(scores)
        variance = sum((s - avg) ** 2 for s in scores) / len(scores)
        return avg, math.sqrt(variance)

    def labelled(self, labels: dict[str, str]) -> str:
        """Join present scores as "<label>: <score>%" in co2/heat/ocean/deforest order."""
        values = {
            "co2": self.co2_score,
            "heat": self.heat_score,
            "ocean": self.ocean_score,
            "deforest": self.deforest_score,
        }
        return ", ".join(
            f"{labels[key]}: {value}%" for key, value in values.items() if value is not None
        )


@dataclass
class AnalysisOk:
    provider: str
    text: str
    confidence: float
    processing_time: int

    is_fallback = False


@dataclass
class AnalysisFallback:
    provider: str
    text: str
    processing_time: int
    error: str

    is_fallback = True
    confidence = 0.0


ProviderResult = Union[AnalysisOk, AnalysisFallback]


class ProviderNotConfigured(RuntimeError):
    pass


class AnalysisProvider(ABC):
    name: str
    fallback_text: str

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    @abstractmethod
    def build_prompt(self, summary: ScoreSummary) -> str:
        ...

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        ...

    @abstractmethod
    def confidence(self, summary: ScoreSummary) -> float:
        ...

    async def analyze(self, summary: ScoreSummary) -> ProviderResult:
        start = time.monotonic()
        try:
            prompt = self.build_prompt(summary)
            text = await asyncio.wait_for(self.complete(prompt), timeout=self.timeout)
            return AnalysisOk(
                provider=self.name,
                text=text,
                confidence=self.confidence(summary),
                processing_time=_elapsed_ms(start),
            )
        except Exception as e:
            logger.warning(f"{self.name} analysis failed, using fallback text: {e!r}")
            return AnalysisFallback(
                provider=self.name,
                text=self.fallback_text,
                processing_time=_elapsed_ms(start),
                error=str(e)[:200] or type(e).__name__,
            )


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)
