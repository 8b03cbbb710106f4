from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from envpinn.database import Base


class AiAnalysis(Base):
    __tablename__ = "ai_analyses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prediction_id = Column(Integer, ForeignKey("predictions.id"), nullable=False)
    provider = Column(String(50), nullable=False)  # openai, gemini, vellum
    analysis = Column(Text, nullable=False)
    confidence = Column(Float, nullable=True)
    processing_time = Column(Integer, nullable=True)  # milliseconds
    is_fallback = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_ai_analyses_prediction_id", "prediction_id"),
    )

    # Relationships
    prediction = relationship("Prediction", back_populates="ai_analyses")
