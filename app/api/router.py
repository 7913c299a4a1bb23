from fastapi import APIRouter

from app.api.endpoints import health, leads, portal, properties, users

router = APIRouter(prefix="/api")

router.include_router(health.router)
router.include_router(leads.router)
router.include_router(properties.router)
router.include_router(users.router)
router.include_router(portal.router)
