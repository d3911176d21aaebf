from api.api_v1.endpoints import health, tables, uploads
from fastapi import APIRouter

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(uploads.router, tags=["uploads"])
api_router.include_router(tables.router, tags=["tables"])
