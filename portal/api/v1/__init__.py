"""API v1 routes."""

from fastapi import APIRouter

from portal.api.v1 import auth, health, news, projects, upload, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(news.router, prefix="/news", tags=["news"])
router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
