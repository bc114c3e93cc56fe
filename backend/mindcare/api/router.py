"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from mindcare.api.routes import auth, moods, journal, chat, health

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(moods.router)
api_router.include_router(journal.router)
api_router.include_router(chat.router)
api_router.include_router(health.router)
