from .video import (
    UploadVideoRequest,
    UploadResponse,
    VideoStatusResponse,
    VideoProgressResponse,
)
from .prediction import (
    ScoreEntry,
    PredictionScores,
    AiAnalysisItem,
    PredictionResponse,
    InsightResponse,
)
from .algorithm import AlgorithmResponse
from .demo import SampleVideoResponse, ScenarioCatalogResponse

__all__ = [
    # Video
    "UploadVideoRequest",
    "UploadResponse",
    "VideoStatusResponse",
    "VideoProgressResponse",
    # Prediction
    "ScoreEntry",
    "PredictionScores",
    "AiAnalysisItem",
    "PredictionResponse",
    "InsightResponse",
    # Algorithm
    "AlgorithmResponse",
    # Demo
    "SampleVideoResponse",
    "ScenarioCatalogResponse",
]
