"""
pihole-ha Configuration Module

Provides settings loading and logging setup.
"""

from .logging import configure_logging
from .settings import LoggingSettings, PromptDefaults, SetupSettings, load_settings

__all__ = [
    "configure_logging",
    "LoggingSettings",
    "PromptDefaults",
    "SetupSettings",
    "load_settings",
]
