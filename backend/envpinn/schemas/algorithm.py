from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class AlgorithmResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: str
    category: str
    accuracy: float
    speed: str
    physics_constraints: dict
    parameters: dict
    is_active: bool

    class Config:
        alias_generator = to_camel
        populate_by_name = True
