from fastapi import APIRouter

from app.api.seasons import router as seasons_router
from app.api.stages import router as stages_router
from app.api.standings import router as standings_router
from app.api.matches import router as matches_router
from app.api.schedule import router as schedule_router

api_router = APIRouter()

# Navigation
api_router.include_router(seasons_router)

# Standings
api_router.include_router(standings_router)
api_router.include_router(stages_router)
api_router.include_router(matches_router)

# Schedule feed
api_router.include_router(schedule_router)
