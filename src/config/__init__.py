"""
Runtime configuration for the video catalog API.

Everything is read from environment variables (or .env). The admin secret,
storage bucket and Snowflake credentials live here and nowhere else.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
