import json
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from envpinn.config import settings
from envpinn.database import Base, make_engine, make_session_factory
from envpinn.models import AiAnalysis, Algorithm, Prediction, Video
from envpinn.services.algorithm_catalog import DEFAULT_ALGORITHMS

logger = logging.getLogger(__name__)


def dump_json(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def load_json(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None


class Storage:
    """Process-lifetime store for videos, predictions, AI analyses and the algorithm catalogue.

    Each instance owns its own engine, so an in-memory URL gives an isolated
    database with its own auto-increment counters.
    """

    def __init__(self, database_url: str = None, seed_algorithms: bool = True):
        self.engine = make_engine(database_url or settings.DATABASE_URL)
        self._session_factory = make_session_factory(self.engine)
        Base.metadata.create_all(bind=self.engine)
        if seed_algorithms:
            self._seed_algorithms()

    def session(self) -> Session:
        return self._session_factory()

    def _seed_algorithms(self):
        db = self.session()
        try:
            if db.query(Algorithm).count():
                return
        finally:
            db.close()
        for algo in DEFAULT_ALGORITHMS:
            self.create_algorithm(**algo)
        logger.info(f"Seeded {len(DEFAULT_ALGORITHMS)} algorithm(s)")

    def _add(self, obj):
        db = self.session()
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return obj
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _get(self, model, obj_id: int):
        db = self.session()
        try:
            return db.get(model, obj_id)
        finally:
            db.close()

    # ── Videos ──────────────────────────────────────────────────

    def create_video(
        self,
        filename: str,
        original_name: str,
        mime_type: str,
        size: int,
        environmental_focus: str,
        analysis_priority: str = None,
        prediction_horizon: int = None,
    ) -> Video:
        return self._add(Video(
            filename=filename,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            environmental_focus=environmental_focus,
            analysis_priority=analysis_priority or "balanced",
            prediction_horizon=prediction_horizon or 7,
            status="uploaded",
        ))

    def get_video(self, video_id: int) -> Optional[Video]:
        return self._get(Video, video_id)

    def list_videos(self) -> list[Video]:
        db = self.session()
        try:
            return db.query(Video).order_by(Video.id.asc()).all()
        finally:
            db.close()

    def update_video_status(
        self, video_id: int, status: str, processed_at: datetime = None
    ) -> Optional[Video]:
        db = self.session()
        try:
            video = db.get(Video, video_id)
            if not video:
                return None
            video.status = status
            video.processed_at = processed_at
            db.commit()
            db.refresh(video)
            return video
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # ── Predictions ─────────────────────────────────────────────

    def create_prediction(
        self,
        video_id: int,
        algorithm: str,
        overall_score: float,
        co2_score: float = None,
        co2_confidence: float = None,
        heat_score: float = None,
        heat_confidence: float = None,
        ocean_score: float = None,
        ocean_confidence: float = None,
        deforest_score: float = None,
        deforest_confidence: float = None,
        physics_constraints: Any = None,
        temporal_data: Any = None,
        spatial_data: Any = None,
        uncertainty_bounds: Any = None,
    ) -> Prediction:
        if self.get_video(video_id) is None:
            raise ValueError(f"Video {video_id} does not exist")
        return self._add(Prediction(
            video_id=video_id,
            algorithm=algorithm,
            overall_score=overall_score,
            co2_score=co2_score,
            co2_confidence=co2_confidence,
            heat_score=heat_score,
            heat_confidence=heat_confidence,
            ocean_score=ocean_score,
            ocean_confidence=ocean_confidence,
            deforest_score=deforest_score,
            deforest_confidence=deforest_confidence,
            physics_constraints_json=dump_json(physics_constraints),
            temporal_data_json=dump_json(temporal_data),
            spatial_data_json=dump_json(spatial_data),
            uncertainty_bounds_json=dump_json(uncertainty_bounds),
        ))

    def get_prediction(self, prediction_id: int) -> Optional[Prediction]:
        return self._get(Prediction, prediction_id)

    def get_predictions_by_video_id(self, video_id: int) -> list[Prediction]:
        db = self.session()
        try:
            return (
                db.query(Prediction)
                .filter(Prediction.video_id == video_id)
                .order_by(Prediction.id.asc())
                .all()
            )
        finally:
            db.close()

    # ── AI analyses ─────────────────────────────────────────────

    def create_ai_analysis(
        self,
        prediction_id: int,
        provider: str,
        analysis: str,
        confidence: float = None,
        processing_time: int = None,
        is_fallback: bool = False,
    ) -> AiAnalysis:
        if self.get_prediction(prediction_id) is None:
            raise ValueError(f"Prediction {prediction_id} does not exist")
        return self._add(AiAnalysis(
            prediction_id=prediction_id,
            provider=provider,
            analysis=analysis,
            confidence=confidence,
            processing_time=processing_time,
            is_fallback=is_fallback,
        ))

    def get_ai_analyses_by_prediction_id(self, prediction_id: int) -> list[AiAnalysis]:
        db = self.session()
        try:
            return (
                db.query(AiAnalysis)
                .filter(AiAnalysis.prediction_id == prediction_id)
                .order_by(AiAnalysis.id.asc())
                .all()
            )
        finally:
            db.close()

    # ── Algorithms ──────────────────────────────────────────────

    def create_algorithm(
        self,
        name: str,
        display_name: str,
        description: str,
        category: str,
        accuracy: float,
        speed: str,
        physics_constraints: dict,
        parameters: dict,
        is_active: bool = True,
    ) -> Algorithm:
        return self._add(Algorithm(
            name=name,
            display_name=display_name,
            description=description,
            category=category,
            accuracy=accuracy,
            speed=speed,
            physics_constraints_json=dump_json(physics_constraints),
            parameters_json=dump_json(parameters),
            is_active=is_active,
        ))

    def get_algorithms(self) -> list[Algorithm]:
        """Active catalogue rows only."""
        db = self.session()
        try:
            return (
                db.query(Algorithm)
                .filter(Algorithm.is_active.is_(True))
                .order_by(Algorithm.id.asc())
                .all()
            )
        finally:
            db.close()

    def get_algorithm(self, algorithm_id: int) -> Optional[Algorithm]:
        return self._get(Algorithm, algorithm_id)

    def get_algorithm_by_name(self, name: str) -> Optional[Algorithm]:
        db = self.session()
        try:
            return db.query(Algorithm).filter(Algorithm.name == name).first()
        finally:
            db.close()
