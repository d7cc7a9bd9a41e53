from fastapi import APIRouter
from app.api import health, realtime, settings
from app.features.billing.api import admin_router, recurring_router, webhook_router
from app.features.indexing.api import router as indexing_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(settings.router)
api_router.include_router(realtime.router)
api_router.include_router(indexing_router)
api_router.include_router(webhook_router)
api_router.include_router(recurring_router)
api_router.include_router(admin_router)
