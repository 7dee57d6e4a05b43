"""SUZ news to Discord publication bot."""

from .settings import IdentityStrategy, Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = [
    "IdentityStrategy",
    "Settings",
    "get_settings",
    "reset_settings_cache",
]
