"""
Progress Panel API Router

Aggregates the domain routers into a single API, and builds the
FastAPI application.

All endpoints are prefixed with /api when included in the app.
"""

from fastapi import APIRouter, FastAPI
import logging

from config import get_settings

from ..analytics import AnalysisValidationError
from .analytics_routes import analytics_router
from .common import analysis_validation_handler

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api")
api_router.include_router(analytics_router)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings()
    app = FastAPI(title=settings.name, version=settings.version, debug=settings.debug)
    app.include_router(api_router)
    app.add_exception_handler(AnalysisValidationError, analysis_validation_handler)
    logger.info(f"{settings.name} {settings.version} ready ({settings.environment})")
    return app
