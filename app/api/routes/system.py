from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from infrastructure.services import SettingsDep

router = APIRouter(tags=["System"])


@router.get("/version")
def get_version(settings: SettingsDep):
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


# Load balancers and the function transport's health route expect this exact body
@router.get("/health", response_class=PlainTextResponse)
def get_health():
    """Healthcheck endpoint. Never touches storage."""
    return "OK"
