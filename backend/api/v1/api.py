from fastapi import APIRouter

from .endpoints import elderly, medication, family, user, health

api_router = APIRouter()

# Note: These routes will be mounted under /api/v1 by main.py
api_router.include_router(health.router, tags=["health"])
api_router.include_router(elderly.router, prefix="/elderly", tags=["elderly"])
api_router.include_router(medication.router, prefix="/medication", tags=["medication"])
api_router.include_router(family.router, prefix="/family", tags=["family"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
