"""
Definition and Value Validation

Build-time checks for definitions and configurations, and the value check
the settings store runs before every write.

Build-time contract:
    - Every definition needs a non-empty key, a type and a default value;
      anything less raises IncompleteDefinitionError naming the key.
    - The default must match the type and pass the definition's validator,
      otherwise InvalidDefaultError.
    - A finished configuration is checked for referential integrity:
      structure keys without a definition ("missing") and definitions
      never placed in the structure ("unused"). Both are logged as
      warnings and returned, never raised.
"""

from __future__ import annotations

import logging
from typing import Any

from pitz.errors import IncompleteDefinitionError, InvalidDefaultError
from pitz.types.definitions import SettingDefinition
from pitz.types.results import ConfigurationDiagnostics
from pitz.types.structure import SettingsConfiguration
from pitz.types.values import SettingValueType, Validator, is_setting_value, matches_type

logger = logging.getLogger(__name__)


def run_validator(validator: Validator | None, value: Any) -> str | None:
    """
    Run a validator against a value.

    A validator rejects by raising ValueError/TypeError (pydantic's
    ValidationError is a ValueError) or by returning False.

    Returns:
        None if accepted, otherwise the rejection reason
    """
    if validator is None:
        return None
    try:
        result = validator(value)
    except (ValueError, TypeError) as e:
        return str(e).strip() or type(e).__name__
    if result is False:
        return "rejected by validator"
    return None


def check_value(
    value: Any,
    value_type: SettingValueType | str | None,
    validator: Validator | None,
) -> str | None:
    """
    Check a candidate value against a declared type and validator.

    Returns:
        None if the value is acceptable, otherwise the rejection reason
    """
    if value is None:
        return "value must not be None"
    if not is_setting_value(value):
        return f"unsupported value type {type(value).__name__}"
    if value_type is not None and not matches_type(value, value_type):
        return f"expected {SettingValueType(value_type).value}, got {type(value).__name__}"
    return run_validator(validator, value)


def check_complete(key: str | None, value_type: Any, default_value: Any) -> None:
    """Raise IncompleteDefinitionError if key, type or default is absent."""
    missing = []
    if not key:
        missing.append("key")
    if value_type is None:
        missing.append("type")
    if default_value is None:
        missing.append("default value")
    if missing:
        raise IncompleteDefinitionError(key, missing)


def validate_definition(definition: SettingDefinition) -> SettingDefinition:
    """
    Check a definition before it is handed to a store.

    Returns:
        The definition, unchanged

    Raises:
        IncompleteDefinitionError: If key, type or default is missing
        InvalidDefaultError: If the default mismatches the type or fails
            the validator
    """
    check_complete(definition.key, definition.type, definition.default_value)

    reason = check_value(definition.default_value, definition.type, definition.validator)
    if reason is not None:
        raise InvalidDefaultError(definition.key, definition.default_value, reason)
    return definition


def check_configuration(configuration: SettingsConfiguration) -> ConfigurationDiagnostics:
    """
    Compare structure references with definitions.

    Returns:
        ConfigurationDiagnostics with missing and unused keys (also logged)
    """
    defined = list(dict.fromkeys(d.key for d in configuration.definitions))
    referenced = configuration.structure.keys()

    defined_set = set(defined)
    referenced_set = set(referenced)

    diagnostics = ConfigurationDiagnostics(
        missing=[key for key in referenced if key not in defined_set],
        unused=[key for key in defined if key not in referenced_set],
    )

    if diagnostics.missing:
        logger.warning(f"Missing setting definitions: {diagnostics.missing}")
    if diagnostics.unused:
        logger.warning(f"Unused setting definitions: {diagnostics.unused}")

    return diagnostics
