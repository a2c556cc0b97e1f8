"""Core: config and application bootstrap (lifespan, exception handlers)."""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
