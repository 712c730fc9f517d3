"""
health routes

the simplest possible "is the server alive" check. also echoes the app name,
environment and practice time zone so you can tell which config is running.
"""

from fastapi import APIRouter

from carelane.core.config import settings

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.environment,
        "timezone": settings.timezone,
    }
