"""API route aggregation.

All routers registered here get mounted in main.py. There is no auth:
knowing a recipient code is the only credential.
"""

from fastapi import APIRouter

from complimentbox.api.compliments import router as compliments_router
from complimentbox.api.health import router as health_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(compliments_router, tags=["compliments"])
