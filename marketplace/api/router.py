"""Top-level /api router — every module router is mounted here."""

from fastapi import APIRouter

from marketplace.modules.auth.router import auth_router, user_router
from marketplace.modules.vehicle.router import router as vehicle_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(vehicle_router)
