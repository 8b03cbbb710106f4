from fastapi import Request

from envpinn.services.pipeline import VideoPipeline
from envpinn.storage import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_pipeline(request: Request) -> VideoPipeline:
    return request.app.state.pipeline
