"""Configuration module with YAML and environment variable support."""

from .settings import (
    CookiePolicy,
    SameSite,
    Settings,
    StateStoreBackend,
    get_settings,
)


__all__ = [
    "CookiePolicy",
    "SameSite",
    "Settings",
    "StateStoreBackend",
    "get_settings",
]
