"""
Assembly

Turns declarative setting definitions and presentation structure into a
SettingsConfiguration, and configurations into store controllers.

Modules:
    builder: Immutable fluent builders (SettingsBuilder and friends)
    validation: Definition checks and configuration diagnostics
    controllers: resolve_controllers() for store registration
    schemas: schema() validators backed by pydantic
"""

from pitz.assembly.builder import GroupBuilder, SettingBuilder, SettingsBuilder, TabBuilder
from pitz.assembly.controllers import resolve_controllers
from pitz.assembly.schemas import schema
from pitz.assembly.validation import check_configuration, check_value, validate_definition

__all__ = [
    "SettingsBuilder",
    "SettingBuilder",
    "TabBuilder",
    "GroupBuilder",
    "resolve_controllers",
    "schema",
    "check_configuration",
    "check_value",
    "validate_definition",
]
