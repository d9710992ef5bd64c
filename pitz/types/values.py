"""
Setting Value Types

Scalar values a setting can hold, and the type tags definitions declare.

A value is one of str, int/float, or bool. None is never a legal value:
absence is represented by a missing key, never by a None entry.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Union

# bool listed first so pydantic's smart union keeps True/False as bools
SettingValue = Union[bool, int, float, str]

SettingValues = dict[str, SettingValue]
"""A snapshot: the complete key -> value map at a point in time."""

RelevanceFunction = Callable[[Mapping[str, SettingValue]], bool]
"""Pure predicate over a snapshot deciding whether a setting is relevant."""

Validator = Callable[[Any], Any]
"""Raises (or returns False) when a candidate value is not acceptable."""


class SettingValueType(str, Enum):
    """Declared type of a setting."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"  # string value chosen from a fixed option list


def is_setting_value(value: Any) -> bool:
    """Return True if value is a legal scalar setting value."""
    return isinstance(value, (bool, int, float, str))


def matches_type(value: Any, value_type: SettingValueType | str) -> bool:
    """Check a value against a declared setting type."""
    value_type = SettingValueType(value_type)
    if value_type in (SettingValueType.STRING, SettingValueType.ENUM):
        return isinstance(value, str)
    if value_type == SettingValueType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, bool)
