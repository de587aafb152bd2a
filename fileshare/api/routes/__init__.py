"""API routes, mounted under API_PREFIX."""

from fastapi import APIRouter

from fileshare.api.routes import auth, files, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(files.router, tags=["files"])
