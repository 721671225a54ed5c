"""
Health check and status endpoints
"""
from fastapi import APIRouter
from datetime import datetime
from app.config import get_settings
from app.utils.helpers import isoformat
from app import __version__

settings = get_settings()

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": isoformat(datetime.utcnow()),
        "version": __version__
    }


@router.get("/api/test")
async def api_test():
    """Smoke-test route for the frontend proxy"""
    return {
        "status": "success",
        "message": f"{settings.app_name} is running",
        "environment": settings.environment,
    }
