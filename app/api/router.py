from fastapi import APIRouter

from api.routes.system import router as system_router
from modules.events.api import router as events_router

api_router = APIRouter()

api_router.include_router(system_router)
api_router.include_router(events_router)
