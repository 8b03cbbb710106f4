import logging
import threading
import time
from datetime import datetime
from typing import Optional

import numpy as np

from envpinn.config import Settings, settings as default_settings
from envpinn.services import analysis_service, pinn_algorithms
from envpinn.services.pinn_algorithms import CATEGORIES, PINNResult
from envpinn.services.providers import AnalysisProvider
from envpinn.services.video_processor import ProcessingStatus, VideoProcessor
from envpinn.storage import Storage

logger = logging.getLogger(__name__)


def prediction_fields(result: PINNResult) -> dict:
    """Flatten a scoring result into Prediction columns."""
    fields = {
        "algorithm": result.algorithm,
        "overall_score": result.scores["overall"],
        "physics_constraints": result.physics_constraints,
        "temporal_data": result.temporal_data,
        "spatial_data": None,
        "uncertainty_bounds": result.uncertainty_bounds,
    }
    for category in CATEGORIES:
        entry = result.category(category)
        fields[f"{category}_score"] = entry["score"] if entry else None
        fields[f"{category}_confidence"] = entry["confidence"] if entry else None
    return fields


class VideoPipeline:
    """Runs uploaded videos through features -> scoring -> provider analyses.

    Progress is kept in memory per video; the Video row only ever records
    uploaded, processing, completed or failed.
    """

    def __init__(
        self,
        storage: Storage,
        providers: list[AnalysisProvider] = None,
        processor: VideoProcessor = None,
        rng: np.random.Generator = None,
        settings: Settings = None,
        progress_retention: float = None,
    ):
        cfg = settings or default_settings
        self.storage = storage
        self.rng = rng if rng is not None else np.random.default_rng(cfg.RANDOM_SEED)
        self.providers = providers if providers is not None else analysis_service.default_providers()
        self.processor = processor or VideoProcessor(
            frame_count=cfg.FEATURE_FRAME_COUNT,
            width=cfg.FEATURE_FRAME_WIDTH,
            height=cfg.FEATURE_FRAME_HEIGHT,
            rng=self.rng,
            simulate_delay=cfg.SIMULATE_PROCESSING_DELAY,
        )
        self._progress: dict[int, ProcessingStatus] = {}
        self._active: set[int] = set()
        self._finished_at: dict[int, float] = {}
        self.progress_retention = (
            progress_retention if progress_retention is not None else cfg.PROGRESS_RETENTION_SECONDS
        )
        self._lock = threading.Lock()

    def get_progress(self, video_id: int) -> Optional[ProcessingStatus]:
        with self._lock:
            return self._progress.get(video_id)

    def get_status(self) -> dict:
        with self._lock:
            return {"active_jobs": len(self._active), "active_video_ids": sorted(self._active)}

    def _set_progress(self, video_id: int, status: ProcessingStatus):
        with self._lock:
            self._progress[video_id] = status

    async def process(self, video_id: int):
        """Background entry point; never raises."""
        with self._lock:
            self._active.add(video_id)
        try:
            await self._process(video_id)
        except Exception:
            logger.exception(f"Processing failed for video {video_id}")
            self._mark_failed(video_id)
        finally:
            self._prune_progress()
            with self._lock:
                self._active.discard(video_id)
                self._finished_at[video_id] = time.monotonic()

    def _prune_progress(self):
        """Forget snapshots of jobs that finished more than ``progress_retention`` seconds ago."""
        cutoff = time.monotonic() - self.progress_retention
        with self._lock:
            expired = [vid for vid, done in self._finished_at.items() if done < cutoff]
            for vid in expired:
                del self._finished_at[vid]
                self._progress.pop(vid, None)

    async def _process(self, video_id: int):
        video = self.storage.update_video_status(video_id, "processing")
        if not video:
            logger.warning(f"Video {video_id} disappeared before processing")
            return

        features = await self.processor.process_video(
            video.filename,
            video.environmental_focus,
            on_progress=lambda status: self._set_progress(video_id, status),
        )
        result = await pinn_algorithms.run_for_focus(video.environmental_focus, features, self.rng)

        prediction = self.storage.create_prediction(video_id=video.id, **prediction_fields(result))
        await analysis_service.analyze_prediction(
            self.storage, self.providers, prediction, video.environmental_focus
        )

        self.storage.update_video_status(video_id, "completed", datetime.utcnow())
        logger.info(
            f"Video {video_id} completed: {result.algorithm} overall={result.scores['overall']:.1f}"
        )

    def _mark_failed(self, video_id: int):
        try:
            self.storage.update_video_status(video_id, "failed")
        except Exception as e:
            logger.error(f"Failed to mark failed state for video {video_id}: {e}")
