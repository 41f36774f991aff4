"""
Progress Panel API

FastAPI routers exposing the analytics as JSON.
"""

from .router import api_router, create_app

__all__ = [
    "api_router",
    "create_app",
]
