from fastapi import APIRouter

from app.api.v1.endpoints import routing, health

router = APIRouter(prefix="/api/v1")

router.include_router(routing.router)
router.include_router(health.router)
