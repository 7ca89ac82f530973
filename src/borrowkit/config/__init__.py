"""Configuration module using Pydantic Settings.

Usage:
    from borrowkit.config import ResourceSettings

    settings = ResourceSettings(track_borrow_sites=True)
"""

from borrowkit.config.settings import ResourceSettings

__all__ = [
    "ResourceSettings",
]
