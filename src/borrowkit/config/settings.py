"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the
resource container.

Usage:
    from borrowkit.config import ResourceSettings

    # Load from environment variables (BORROWKIT_*)
    settings = ResourceSettings()

    # Or override with explicit values
    settings = ResourceSettings(track_borrow_sites=True)
    resources = Resources(settings=settings)
"""

from __future__ import annotations

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for config module. "
        "Install with: pip install borrowkit"
    ) from e


class ResourceSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for a Resources container.

    Attributes:
        verify_dynamic_types: Re-check the stored value against the type
            handle on dynamic fetches before handing out a guard.
        track_borrow_sites: Record the caller location of every live borrow
            and name the holders in BorrowConflictError messages. Slows
            every borrow; meant for debugging.

    Environment Variables:
        BORROWKIT_VERIFY_DYNAMIC_TYPES
        BORROWKIT_TRACK_BORROW_SITES
    """

    model_config = SettingsConfigDict(
        env_prefix="BORROWKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    verify_dynamic_types: bool = True
    track_borrow_sites: bool = False
