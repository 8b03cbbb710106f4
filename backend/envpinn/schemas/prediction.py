from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


class ScoreEntry(BaseModel):
    score: float
    confidence: float


class PredictionScores(BaseModel):
    co2: Optional[ScoreEntry] = None
    heat: Optional[ScoreEntry] = None
    ocean: Optional[ScoreEntry] = None
    deforest: Optional[ScoreEntry] = None
    overall: float


class AiAnalysisItem(BaseModel):
    provider: str
    analysis: str
    confidence: Optional[float] = None
    processing_time: Optional[int] = None
    fallback: bool = False

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PredictionResponse(BaseModel):
    id: int
    video_id: int
    algorithm: str
    scores: PredictionScores
    temporal_data: list[dict]
    physics_constraints: Optional[dict] = None
    uncertainty_bounds: Optional[dict] = None
    spatial_data: Optional[dict] = None
    ai_analyses: list[AiAnalysisItem]
    created_at: datetime

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class InsightResponse(BaseModel):
    prediction_id: int
    insight: dict
    confidence: float
    fallback: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True
