"""
Health API Routes
"""
from fastapi import APIRouter

from app.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe; the service holds no local state to check."""
    return {"status": "healthy", "environment": settings.app_env}
