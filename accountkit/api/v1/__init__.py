"""API v1 routes."""

from fastapi import APIRouter

from accountkit.api.v1 import accounts, auth, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(accounts.admins_router, prefix="/admins", tags=["admins"])
router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
