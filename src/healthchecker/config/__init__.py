"""
Configuration for the health checker.
"""

from healthchecker.config.settings import (
    HealthSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "HealthSettings",
    "get_settings",
    "reset_settings",
]
