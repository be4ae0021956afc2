"""API route registration."""

from fastapi import APIRouter

from servicehealth.api.handlers.health import router as health_router
from servicehealth.api.handlers.info import router as info_router

# Router holding the standard endpoints every service exposes
api_router = APIRouter()

# Include service information route
api_router.include_router(info_router, tags=["info"])

# Include health check routes
api_router.include_router(health_router, tags=["health"])
