"""
API v1 router aggregating all endpoints.
"""
from fastapi import APIRouter

from app.api.v1.audits import router as audits_router
from app.api.v1.categories import router as categories_router
from app.api.v1.websites import router as websites_router

api_router = APIRouter()

api_router.include_router(categories_router)
api_router.include_router(audits_router)
api_router.include_router(websites_router)
