import logging
from fastapi import APIRouter, Depends, HTTPException
from envpinn.config import settings
from envpinn.dependencies import get_storage
from envpinn.schemas.demo import SampleVideoResponse, ScenarioCatalogResponse
from envpinn.services.sample_data import SAMPLE_SCENARIOS, SAMPLE_VIDEO_METADATA, process_sample_video
from envpinn.storage import Storage

logger = logging.getLogger(__name__)
router = APIRouter(tags=["demo"])


@router.post("/demo/sample-video", response_model=SampleVideoResponse)
async def run_sample_video(storage: Storage = Depends(get_storage)):
    """Create a fresh canned Amazon-deforestation run (new records on every call)."""
    try:
        delay = 1.0 if settings.SIMULATE_PROCESSING_DELAY else 0
        result = await process_sample_video(storage, delay_seconds=delay)
    except Exception:
        logger.exception("Sample video processing failed")
        raise HTTPException(status_code=500, detail="Failed to process sample video")

    return SampleVideoResponse(
        message="Sample video processed successfully",
        video_id=result["videoId"],
        prediction_id=result["predictionId"],
    )


@router.get("/demo/scenarios", response_model=ScenarioCatalogResponse)
def list_scenarios():
    return ScenarioCatalogResponse(scenarios=SAMPLE_SCENARIOS, sample_video=SAMPLE_VIDEO_METADATA)
