"""
Health Check Routes

Endpoints for service health monitoring.
"""
from datetime import datetime

from fastapi import APIRouter, Depends

from ..config import Config
from ..services.engine_service import EngineService
from .deps import get_engine

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": Config.APP_NAME,
        "version": Config.VERSION,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/ready")
async def readiness_check(engine: EngineService = Depends(get_engine)):
    """Readiness check - storage loaded and services wired"""
    return {
        "ready": engine.is_initialized,
        "storage": type(engine.storage).__name__,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/live")
async def liveness_check():
    """Liveness check - indicates if service is running"""
    return {
        "alive": True,
        "timestamp": datetime.utcnow().isoformat()
    }
