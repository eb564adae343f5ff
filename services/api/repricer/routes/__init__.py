"""API routes."""

from fastapi import APIRouter

from repricer.routes import admin

api_router = APIRouter()

# Admin endpoints (repricing previews, metal rate)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
