"""Health check and monitoring endpoints"""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_broadcaster
from app.realtime.broadcaster import RealtimeBroadcaster

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "indexnow-studio-backend",
    }


@router.get("/realtime")
async def realtime_health(broadcaster: RealtimeBroadcaster = Depends(get_broadcaster)):
    """
    Realtime connection statistics.

    Returns the number of open sockets and the distinct users behind them.
    """
    return {
        "status": "healthy" if broadcaster.is_attached else "detached",
        **broadcaster.get_connection_stats(),
    }
