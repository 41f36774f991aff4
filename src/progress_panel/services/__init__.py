"""
Services for the progress panel.
"""

from .analytics_service import AnalyticsService, get_analytics_service, set_analytics_service

__all__ = [
    "AnalyticsService",
    "get_analytics_service",
    "set_analytics_service",
]
