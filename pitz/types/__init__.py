"""
Type Definitions

Pydantic models for all data structures.

Value Types:
    - SettingValue, SettingValues - Scalar values and snapshots
    - SettingValueType - Declared type tags
    - RelevanceFunction, Validator - Callable contracts

Definition Models:
    - SettingDefinition - Immutable setting declaration
    - SettingController - Store-registered form with display metadata
    - SettingUIConfig, ControlProps, SelectOption - Display configuration

Structure Models:
    - SettingStructureItem, SettingsGroup, SettingsTab, SettingsStructure
    - SettingsConfiguration - Assembler output {definitions, structure}

Result Models:
    - RelevanceValidationResult, ConfigurationDiagnostics

All models are frozen: definitions are immutable after assembly.
"""

from pitz.types.definitions import (
    ControlProps,
    ControlType,
    SelectOption,
    SettingController,
    SettingDefinition,
    SettingUIConfig,
)
from pitz.types.results import ConfigurationDiagnostics, RelevanceValidationResult
from pitz.types.structure import (
    SettingsConfiguration,
    SettingsGroup,
    SettingsStructure,
    SettingsTab,
    SettingStructureItem,
)
from pitz.types.values import (
    RelevanceFunction,
    SettingValue,
    SettingValues,
    SettingValueType,
    Validator,
    is_setting_value,
    matches_type,
)

__all__ = [
    # Value Types
    "SettingValue",
    "SettingValues",
    "SettingValueType",
    "RelevanceFunction",
    "Validator",
    "is_setting_value",
    "matches_type",
    # Definition Models
    "SettingDefinition",
    "SettingController",
    "SettingUIConfig",
    "ControlProps",
    "ControlType",
    "SelectOption",
    # Structure Models
    "SettingStructureItem",
    "SettingsGroup",
    "SettingsTab",
    "SettingsStructure",
    "SettingsConfiguration",
    # Result Models
    "RelevanceValidationResult",
    "ConfigurationDiagnostics",
]
