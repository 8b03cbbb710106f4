import logging
from fastapi import APIRouter, Depends, HTTPException
from envpinn.dependencies import get_pipeline, get_storage
from envpinn.models import Prediction, Video
from envpinn.schemas.prediction import (
    AiAnalysisItem,
    InsightResponse,
    PredictionResponse,
    PredictionScores,
    ScoreEntry,
)
from envpinn.services.analysis_service import summary_from_prediction
from envpinn.services.gemini_service import GeminiService
from envpinn.services.pinn_algorithms import CATEGORIES
from envpinn.services.pipeline import VideoPipeline
from envpinn.storage import Storage, load_json

logger = logging.getLogger(__name__)
router = APIRouter(tags=["predictions"])


def build_prediction_response(storage: Storage, prediction: Prediction) -> PredictionResponse:
    analyses = storage.get_ai_analyses_by_prediction_id(prediction.id)

    scores = {"overall": prediction.overall_score}
    for category in CATEGORIES:
        score = getattr(prediction, f"{category}_score")
        if score is not None:
            confidence = getattr(prediction, f"{category}_confidence")
            scores[category] = ScoreEntry(score=score, confidence=confidence or 0)

    temporal = load_json(prediction.temporal_data_json)
    return PredictionResponse(
        id=prediction.id,
        video_id=prediction.video_id,
        algorithm=prediction.algorithm,
        scores=PredictionScores(**scores),
        temporal_data=temporal if isinstance(temporal, list) else [],
        physics_constraints=load_json(prediction.physics_constraints_json),
        uncertainty_bounds=load_json(prediction.uncertainty_bounds_json),
        spatial_data=load_json(prediction.spatial_data_json),
        ai_analyses=[
            AiAnalysisItem(
                provider=a.provider,
                analysis=a.analysis,
                confidence=a.confidence,
                processing_time=a.processing_time,
                fallback=a.is_fallback,
            )
            for a in analyses
        ],
        created_at=prediction.created_at,
    )


def _get_prediction_or_404(storage: Storage, prediction_id: int) -> Prediction:
    prediction = storage.get_prediction(prediction_id)
    if not prediction:
        raise HTTPException(status_code=404, detail="Prediction not found")
    return prediction


@router.get(
    "/prediction/{prediction_id}",
    response_model=PredictionResponse,
    response_model_exclude_none=True,
)
def get_prediction(prediction_id: int, storage: Storage = Depends(get_storage)):
    prediction = _get_prediction_or_404(storage, prediction_id)
    try:
        return build_prediction_response(storage, prediction)
    except Exception:
        logger.exception(f"Failed to build prediction {prediction_id}")
        raise HTTPException(status_code=500, detail="Failed to get prediction")


@router.post("/prediction/{prediction_id}/insight", response_model=InsightResponse)
async def get_prediction_insight(
    prediction_id: int,
    storage: Storage = Depends(get_storage),
    pipeline: VideoPipeline = Depends(get_pipeline),
):
    """Structured Gemini risk assessment for a stored prediction (not persisted)."""
    prediction = _get_prediction_or_404(storage, prediction_id)
    video: Video = storage.get_video(prediction.video_id)
    focus = video.environmental_focus if video else ""

    gemini = next((p for p in pipeline.providers if isinstance(p, GeminiService)), None) or GeminiService()
    summary = summary_from_prediction(prediction, focus)
    result = await gemini.generate_structured_insight(summary, load_json(prediction.temporal_data_json))
    return InsightResponse(prediction_id=prediction.id, **result)
