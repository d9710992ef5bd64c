"""
Error Types

Exceptions raised by the settings pipeline.

Hierarchy:
    PitzError
    ├── DefinitionError            - configuration-build time, fatal
    │   ├── IncompleteDefinitionError
    │   └── InvalidDefaultError
    ├── SettingValidationError     - candidate value rejected by its schema
    ├── PersistenceError           - storage adapter failed or timed out
    └── StorageCorruptionError     - persisted bytes could not be decoded

Validation and persistence errors always propagate to the caller of the
mutating store operation and are also recorded as the store's last error.
"""

from __future__ import annotations

from typing import Any


class PitzError(Exception):
    """Base class for all pitz errors."""


class DefinitionError(PitzError):
    """A setting definition cannot be accepted."""

    def __init__(self, key: str | None, message: str) -> None:
        self.key = key
        super().__init__(message)


class IncompleteDefinitionError(DefinitionError):
    """A definition lacks a key, a type, or a default value."""

    def __init__(self, key: str | None, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            key,
            f"Incomplete setting definition for {key!r}: missing {', '.join(missing)}",
        )


class InvalidDefaultError(DefinitionError):
    """A definition's default value does not satisfy its own type or validator."""

    def __init__(self, key: str, default_value: Any, reason: str) -> None:
        self.default_value = default_value
        self.reason = reason
        super().__init__(
            key, f"Invalid default value for {key!r}: {default_value!r} ({reason})"
        )


class SettingValidationError(PitzError):
    """A candidate value was rejected for a setting."""

    def __init__(self, key: str, value: Any, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for {key}: {value!r} ({reason})")


class PersistenceError(PitzError):
    """The storage adapter rejected a read, write, delete or clear."""

    def __init__(self, key: str | None, message: str) -> None:
        self.key = key
        super().__init__(message)


class StorageCorruptionError(PitzError):
    """A persisted entry could not be decoded into a setting value."""
