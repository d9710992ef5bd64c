"""
Store

Modules:
    settings_store: SettingsStore - validate -> persist -> apply pipeline
    throttle: Leading/trailing throttle for snapshot notifications
"""

from pitz.store.settings_store import SettingsStore
from pitz.store.throttle import Throttle, ThrottleState

__all__ = ["SettingsStore", "Throttle", "ThrottleState"]
