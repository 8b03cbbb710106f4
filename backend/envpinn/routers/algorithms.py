from fastapi import APIRouter, Depends, HTTPException
from envpinn.dependencies import get_storage
from envpinn.models import Algorithm
from envpinn.schemas.algorithm import AlgorithmResponse
from envpinn.storage import Storage, load_json

router = APIRouter(tags=["algorithms"])


def _to_response(algo: Algorithm) -> AlgorithmResponse:
    return AlgorithmResponse(
        id=algo.id,
        name=algo.name,
        display_name=algo.display_name,
        description=algo.description,
        category=algo.category,
        accuracy=algo.accuracy,
        speed=algo.speed,
        physics_constraints=load_json(algo.physics_constraints_json) or {},
        parameters=load_json(algo.parameters_json) or {},
        is_active=algo.is_active,
    )


@router.get("/algorithms", response_model=list[AlgorithmResponse])
def list_algorithms(storage: Storage = Depends(get_storage)):
    return [_to_response(a) for a in storage.get_algorithms()]


@router.get("/algorithms/{algorithm_id}", response_model=AlgorithmResponse)
def get_algorithm(algorithm_id: int, storage: Storage = Depends(get_storage)):
    algo = storage.get_algorithm(algorithm_id)
    if not algo:
        raise HTTPException(status_code=404, detail="Algorithm not found")
    return _to_response(algo)
