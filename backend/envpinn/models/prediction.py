from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from envpinn.database import Base


class Prediction(Base):
    __tablename__ = "predictions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False)
    algorithm = Column(String(100), nullable=False)
    co2_score = Column(Float, nullable=True)
    co2_confidence = Column(Float, nullable=True)
    heat_score = Column(Float, nullable=True)
    heat_confidence = Column(Float, nullable=True)
    ocean_score = Column(Float, nullable=True)
    ocean_confidence = Column(Float, nullable=True)
    deforest_score = Column(Float, nullable=True)
    deforest_confidence = Column(Float, nullable=True)
    overall_score = Column(Float, nullable=False)
    # JSON documents, stored as text
    physics_constraints_json = Column(Text, nullable=True)
    temporal_data_json = Column(Text, nullable=True)
    spatial_data_json = Column(Text, nullable=True)
    uncertainty_bounds_json = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_predictions_video_id", "video_id"),
    )

    # Relationships
    video = relationship("Video", back_populates="predictions")
    ai_analyses = relationship("AiAnalysis", back_populates="prediction")
