"""Seasons API package: assembles sub-routers into a single router."""

from fastapi import APIRouter

from app.api.seasons.router import router as _base_router

router = APIRouter()
router.include_router(_base_router)
