from fastapi import APIRouter

from scribo.api import health
from scribo.features.ai_assist import router as ai_assist_router
from scribo.features.export import router as export_router
from scribo.features.notes import router as notes_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(notes_router)
api_router.include_router(export_router)
api_router.include_router(ai_assist_router)
