"""
Health check endpoints
"""

from fastapi import APIRouter
from datetime import datetime, timezone

from core.config import settings
from services.validator import validator

router = APIRouter()


@router.get("/status")
async def health_status():
    """Get detailed health status"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "rules": validator.rules(),
        "version": "0.1.0"
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe"""
    return {"ready": True}
