from fastapi import APIRouter

from skeleton_coach.api import api_healthcheck, api_exercise

router = APIRouter()

router.include_router(api_healthcheck.router, tags=["health-check"], prefix="/healthcheck")
router.include_router(api_exercise.router, tags=["exercise"], prefix="/exercise")
