from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class SampleVideoResponse(BaseModel):
    message: str
    video_id: int
    prediction_id: int

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ScenarioCatalogResponse(BaseModel):
    scenarios: dict[str, dict]
    sample_video: dict

    class Config:
        alias_generator = to_camel
        populate_by_name = True
