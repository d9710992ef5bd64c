"""
Structure Types

Presentation grouping of settings: tabs contain groups, groups contain
references to setting keys. A structure item may carry its own relevance
predicate, which layers on top of (and is independent from) the
definition-level predicate.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict

from pitz.types.definitions import SettingDefinition
from pitz.types.values import RelevanceFunction


class SettingStructureItem(BaseModel):
    """Reference to a definition key inside a group."""

    key: str
    order: int | None = None
    overrides: dict[str, Any] | None = None
    relevance: RelevanceFunction | None = None

    model_config = ConfigDict(frozen=True)


class SettingsGroup(BaseModel):
    """Titled group of setting references."""

    title: str
    description: str | None = None
    settings: tuple[SettingStructureItem, ...] = ()

    model_config = ConfigDict(frozen=True)


class SettingsTab(BaseModel):
    """Top-level presentation tab."""

    id: str
    label: str
    icon: str = ""
    groups: tuple[SettingsGroup, ...] = ()
    is_constant: bool = False

    model_config = ConfigDict(frozen=True)


class SettingsStructure(BaseModel):
    """Full presentation structure."""

    tabs: tuple[SettingsTab, ...] = ()

    model_config = ConfigDict(frozen=True)

    def iter_items(self) -> Iterator[SettingStructureItem]:
        """Yield every structure item in tab/group/setting order."""
        for tab in self.tabs:
            for group in tab.groups:
                yield from group.settings

    def keys(self) -> list[str]:
        """All referenced keys in structure order, without duplicates."""
        return list(dict.fromkeys(item.key for item in self.iter_items()))

    def find(self, key: str) -> SettingStructureItem | None:
        """First structure item referencing key, or None."""
        for item in self.iter_items():
            if item.key == key:
                return item
        return None


class SettingsConfiguration(BaseModel):
    """
    Complete assembler output consumed by the store.

    Attributes:
        definitions: One definition per key
        structure: Presentation grouping referencing definition keys
    """

    definitions: tuple[SettingDefinition, ...] = ()
    structure: SettingsStructure = SettingsStructure()

    model_config = ConfigDict(frozen=True)

    def definition_for(self, key: str) -> SettingDefinition | None:
        """Return the definition for key, or None."""
        for definition in self.definitions:
            if definition.key == key:
                return definition
        return None
