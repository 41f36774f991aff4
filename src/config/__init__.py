"""Configuration module for the progress panel."""

from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
