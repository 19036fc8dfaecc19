"""
Configuration
Settings loaded from environment variables and the .env file.
"""

from .settings import Settings, get_settings, reset_settings

__all__ = ["Settings", "get_settings", "reset_settings"]
