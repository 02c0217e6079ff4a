"""
Service Layer

Service classes for common operations.
"""

from responsescli.services.config_service import ConfigService

__all__ = [
    "ConfigService",
]
