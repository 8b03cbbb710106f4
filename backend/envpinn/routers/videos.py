import re
import uuid
import logging
from pathlib import Path, PurePosixPath
from typing import Optional
import aiofiles
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from envpinn.config import settings, ALLOWED_VIDEO_MIME_TYPES
from envpinn.dependencies import get_pipeline, get_storage
from envpinn.routers.predictions import build_prediction_response
from envpinn.schemas.prediction import PredictionResponse
from envpinn.schemas.video import (
    UploadResponse,
    UploadVideoRequest,
    VideoProgressResponse,
    VideoStatusResponse,
)
from envpinn.services.pipeline import VideoPipeline
from envpinn.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["videos"])

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

_MIME_EXTENSIONS = {
    "video/mp4": ".mp4",
    "video/avi": ".avi",
    "video/mov": ".mov",
    "video/quicktime": ".mov",
}


def _sanitize_filename(raw: str) -> str:
    """Strip path components and dangerous characters from user-supplied filenames."""
    name = PurePosixPath(raw.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("_", name)
    if len(name) > 200:
        stem, ext = name.rsplit(".", 1) if "." in name else (name, "")
        name = stem[: 200 - len(ext) - 1] + "." + ext if ext else stem[:200]
    return name or "video"


def _validation_message(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(loc) for loc in err["loc"])
        parts.append(f"{field}: {err['msg']}")
    return "Invalid upload parameters: " + "; ".join(parts)


async def _save_upload(file: UploadFile, filepath: Path, max_bytes: int) -> Optional[int]:
    """Stream to disk; returns bytes written, or None (file removed) once the cap is crossed."""
    bytes_written = 0
    async with aiofiles.open(filepath, "wb") as f:
        while chunk := await file.read(256 * 1024):
            bytes_written += len(chunk)
            if bytes_written > max_bytes:
                break
            await f.write(chunk)

    if bytes_written > max_bytes:
        filepath.unlink(missing_ok=True)
        return None
    return bytes_written


@router.post("/upload", response_model=UploadResponse)
async def upload_video(
    background_tasks: BackgroundTasks,
    video: Optional[UploadFile] = File(None),
    environmental_focus: Optional[str] = Form(None, alias="environmentalFocus"),
    analysis_priority: Optional[str] = Form(None, alias="analysisPriority"),
    prediction_horizon: Optional[str] = Form(None, alias="predictionHorizon"),
    storage: Storage = Depends(get_storage),
    pipeline: VideoPipeline = Depends(get_pipeline),
):
    if video is None:
        raise HTTPException(status_code=400, detail="No video file uploaded")

    if video.content_type not in ALLOWED_VIDEO_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only MP4, AVI, and MOV files are allowed.",
        )

    try:
        request_data = UploadVideoRequest.model_validate({
            "environmentalFocus": environmental_focus,
            "analysisPriority": analysis_priority,
            "predictionHorizon": prediction_horizon,
        })
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_validation_message(e))

    original_name = _sanitize_filename(video.filename or "video")
    upload_dir = Path(settings.UPLOAD_DIR)
    filepath = None
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        ext = _MIME_EXTENSIONS.get(video.content_type) or Path(original_name).suffix.lower()
        filepath = upload_dir / f"{uuid.uuid4()}{ext}"

        size = await _save_upload(video, filepath, settings.MAX_FILE_SIZE_MB * 1024 * 1024)
        if size is None:
            filepath = None
            raise HTTPException(
                status_code=400,
                detail=f"File exceeds the maximum size of {settings.MAX_FILE_SIZE_MB}MB",
            )

        record = storage.create_video(
            filename=filepath.name,
            original_name=original_name,
            mime_type=video.content_type,
            size=size,
            environmental_focus=request_data.environmental_focus,
            analysis_priority=request_data.analysis_priority,
            prediction_horizon=request_data.prediction_horizon,
        )
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"Upload failed for {original_name}")
        if filepath and filepath.exists():
            filepath.unlink()
        raise HTTPException(status_code=500, detail="Upload failed")

    # Runs after the response has been sent
    background_tasks.add_task(pipeline.process, record.id)
    logger.info(f"Video {record.id} uploaded ({original_name}, {size} bytes, {record.environmental_focus})")

    return UploadResponse(
        video_id=record.id,
        message="Video uploaded successfully. Processing will begin shortly.",
        status=record.status,
    )


@router.get("/video/{video_id}/status", response_model=VideoStatusResponse)
def get_video_status(video_id: int, storage: Storage = Depends(get_storage)):
    video = storage.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


@router.get("/video/{video_id}/progress", response_model=VideoProgressResponse)
def get_video_progress(
    video_id: int,
    storage: Storage = Depends(get_storage),
    pipeline: VideoPipeline = Depends(get_pipeline),
):
    """Latest in-memory progress snapshot for the simulated progress bar."""
    video = storage.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")

    status = pipeline.get_progress(video_id)
    if status is None:
        # Snapshots of finished jobs expire; the stored status still says how it ended
        if video.status == "completed":
            return VideoProgressResponse(
                video_id=video_id, stage="complete", progress=100, message="Video processing complete"
            )
        if video.status == "failed":
            return VideoProgressResponse(
                video_id=video_id, stage="failed", progress=0, message="Video processing failed"
            )
        return VideoProgressResponse(video_id=video_id, stage="pending", progress=0, message="Waiting to start")
    return VideoProgressResponse(
        video_id=video_id, stage=status.stage, progress=status.progress, message=status.message
    )


@router.get(
    "/video/{video_id}/predictions",
    response_model=list[PredictionResponse],
    response_model_exclude_none=True,
)
def get_video_predictions(video_id: int, storage: Storage = Depends(get_storage)):
    try:
        return [
            build_prediction_response(storage, p)
            for p in storage.get_predictions_by_video_id(video_id)
        ]
    except Exception:
        logger.exception(f"Failed to list predictions for video {video_id}")
        raise HTTPException(status_code=500, detail="Failed to get predictions")
