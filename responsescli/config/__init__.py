"""
Configuration Module

Settings loading and the typed Settings view.
"""

from responsescli.config.settings import Settings, load_settings, timeout_to_seconds

__all__ = [
    "Settings",
    "load_settings",
    "timeout_to_seconds",
]
