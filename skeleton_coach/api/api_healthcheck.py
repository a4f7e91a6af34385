from typing import Any

from fastapi import APIRouter, Depends

from skeleton_coach.schemas.sche_base import DataResponse
from skeleton_coach.services.srv_exercise import ExerciseService, get_exercise_service

router = APIRouter()


@router.get("", response_model=DataResponse[dict])
async def get(exercise_service: ExerciseService = Depends(get_exercise_service)) -> Any:
    return DataResponse().success_response(data={
        "status": "healthy",
        "active_sessions": exercise_service.active_count,
    })
