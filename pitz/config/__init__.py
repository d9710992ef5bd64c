"""
Configuration System

Manages configuration for pitz with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to PitzConfig())
    2. Environment variables (PITZ_* prefix)
    3. Config file (PitzConfig.from_file)
    4. Built-in defaults

Modules:
    settings: PitzConfig class
"""

from pitz.config.settings import STORAGE_BACKENDS, PitzConfig

__all__ = ["PitzConfig", "STORAGE_BACKENDS"]
