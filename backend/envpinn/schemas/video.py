from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Literal, Optional


class UploadVideoRequest(BaseModel):
    environmental_focus: Literal[
        "carbon-dioxide", "heat-flux", "ocean-currents", "deforestation", "multi-parameter"
    ]
    analysis_priority: Literal["accuracy", "speed", "balanced"]
    prediction_horizon: int = Field(ge=1, le=30)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class UploadResponse(BaseModel):
    video_id: int
    message: str
    status: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class VideoStatusResponse(BaseModel):
    id: int
    status: str
    processed_at: Optional[datetime] = None
    environmental_focus: str

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class VideoProgressResponse(BaseModel):
    video_id: int
    stage: str
    progress: int
    message: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True
