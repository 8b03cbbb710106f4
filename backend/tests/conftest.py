from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

from envpinn.config import settings
from envpinn.main import create_app
from envpinn.services.pipeline import VideoPipeline
from envpinn.services.providers import AnalysisProvider, ScoreSummary
from envpinn.services.video_processor import VideoProcessor
from envpinn.storage import Storage


class StubProvider(AnalysisProvider):
    """Provider double that records prompts and either answers or raises."""

    def __init__(self, name: str, text: str = "stub analysis", error: Exception | None = None,
                 confidence_value: float = 0.8):
        super().__init__(timeout=None)
        self.name = name
        self.fallback_text = f"{name} fallback"
        self.text = text
        self.error = error
        self.confidence_value = confidence_value
        self.prompts: list[str] = []

    def build_prompt(self, summary: ScoreSummary) -> str:
        return f"{summary.algorithm} / {summary.environmental_focus}"

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text

    def confidence(self, summary: ScoreSummary) -> float:
        return self.confidence_value


@pytest.fixture()
def make_provider():
    return StubProvider


@pytest.fixture()
def storage() -> Storage:
    return Storage("sqlite://")


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture()
def processor(rng: np.random.Generator) -> VideoProcessor:
    return VideoProcessor(frame_count=4, width=16, height=12, rng=rng, simulate_delay=False)


@pytest.fixture()
def providers() -> list[StubProvider]:
    return [StubProvider("openai"), StubProvider("gemini"), StubProvider("vellum")]


@pytest.fixture()
def pipeline(storage, providers, processor, rng) -> VideoPipeline:
    return VideoPipeline(storage, providers=providers, processor=processor, rng=rng)


@pytest.fixture()
def upload_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    target = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(target))
    monkeypatch.setattr(settings, "SIMULATE_PROCESSING_DELAY", False)
    return target


@pytest.fixture()
def client(storage, pipeline, upload_dir):
    app = create_app(storage=storage, pipeline=pipeline)
    with TestClient(app) as test_client:
        yield test_client
