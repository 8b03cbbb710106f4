from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from envpinn.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(500), nullable=False)
    original_name = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    processed_at = Column(DateTime, nullable=True)
    status = Column(String(50), nullable=False, default="uploaded")  # uploaded, processing, completed, failed
    environmental_focus = Column(String(50), nullable=False)
    analysis_priority = Column(String(50), nullable=False, default="balanced")
    prediction_horizon = Column(Integer, nullable=False, default=7)

    # Relationships
    predictions = relationship("Prediction", back_populates="video")
