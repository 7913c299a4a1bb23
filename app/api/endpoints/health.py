from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/config")
async def public_config() -> dict:
    """Hosted backend settings that browsers are allowed to see."""
    return settings.public_config()
