"""
Health check endpoints
"""

from fastapi import APIRouter, Request
from datetime import datetime, timezone

from core.config import settings

router = APIRouter()


@router.get("/status")
async def health_status(request: Request):
    """Get detailed health status"""
    state = request.app.state.batch_processor.state
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "version": "0.1.0",
        "batch_status": state.status.value
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe"""
    return {"ready": True}
