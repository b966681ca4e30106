"""
Settings access point.

    from labops.core.config import settings
"""
from labops.core.settings import Settings, get_settings

settings: Settings = get_settings()

__all__ = ["settings", "Settings", "get_settings"]
