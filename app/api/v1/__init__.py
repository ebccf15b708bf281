"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, auth, categories, collections, health, images, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(images.router, prefix="/images", tags=["images"])
router.include_router(categories.router, prefix="/categories", tags=["categories"])
router.include_router(collections.router, prefix="/collections", tags=["collections"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
