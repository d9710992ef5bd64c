"""
Configuration Builder

Fluent, immutable assembly of setting definitions and presentation
structure into a SettingsConfiguration.

Every method returns a new builder; no builder is ever mutated, so a
partially built chain can be reused as a template. Each builder variant
only offers the operations that are valid in its state:

    SettingsBuilder ──setting()──▶ SettingBuilder ──setting()/tab()/build()──▶ ...
                    ──tab()──────▶ TabBuilder ──group()──▶ GroupBuilder

Example:
    >>> config = (
    ...     SettingsBuilder()
    ...     .setting("audio.enabled").type("boolean").default_value(True)
    ...     .toggle("Enable Audio")
    ...     .setting("audio.volume").type("number").default_value(80)
    ...     .slider("Volume", min=0, max=100)
    ...     .depends_on(RelevanceTemplates.depends_on("audio.enabled"))
    ...     .tab("audio", "Audio")
    ...     .group("Output").settings(["audio.enabled", "audio.volume"])
    ...     .build()
    ... )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from pitz.assembly.schemas import schema as schema_validator
from pitz.assembly.validation import check_complete, check_configuration, validate_definition
from pitz.errors import DefinitionError
from pitz.types.definitions import ControlProps, SelectOption, SettingDefinition, SettingUIConfig
from pitz.types.structure import (
    SettingsConfiguration,
    SettingsGroup,
    SettingsStructure,
    SettingsTab,
    SettingStructureItem,
)
from pitz.types.values import RelevanceFunction, SettingValue, SettingValueType, Validator

logger = logging.getLogger(__name__)


def _select_option(option: Any) -> SelectOption:
    if isinstance(option, SelectOption):
        return option
    if isinstance(option, Mapping):
        return SelectOption(**option)
    if isinstance(option, tuple) and len(option) == 2:
        return SelectOption(label=option[0], value=option[1])
    # Bare string: label and value are the same
    return SelectOption(label=str(option), value=str(option))


# -----------------------------------------------------------------------------
# Root builder
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SettingsBuilder:
    """Collected definitions and tabs; entry point of every chain."""

    definitions: tuple[SettingDefinition, ...] = ()
    tabs: tuple[SettingsTab, ...] = ()

    def setting(self, key: str) -> SettingBuilder:
        """Start a new setting definition."""
        return SettingBuilder(parent=self, key=key)

    def tab(self, id: str, label: str, icon: str = "") -> TabBuilder:
        """Start a new tab."""
        return TabBuilder(parent=self, id=id, label=label, icon=icon)

    def add_definition(self, definition: SettingDefinition) -> SettingsBuilder:
        """Add a definition; a definition with the same key is replaced in place."""
        definitions = list(self.definitions)
        for index, existing in enumerate(definitions):
            if existing.key == definition.key:
                definitions[index] = definition
                break
        else:
            definitions.append(definition)
        return replace(self, definitions=tuple(definitions))

    def add_tab(self, tab: SettingsTab) -> SettingsBuilder:
        """Add a finished tab."""
        return replace(self, tabs=self.tabs + (tab,))

    def build(self) -> SettingsConfiguration:
        """Produce the configuration without referential checks."""
        return SettingsConfiguration(
            definitions=self.definitions,
            structure=SettingsStructure(tabs=self.tabs),
        )

    def build_with_validation(self) -> SettingsConfiguration:
        """Produce the configuration and log missing/unused key warnings."""
        configuration = self.build()
        check_configuration(configuration)
        return configuration

    @classmethod
    def from_configuration(cls, configuration: SettingsConfiguration) -> SettingsBuilder:
        """Seed a builder with an existing configuration."""
        return cls(
            definitions=tuple(configuration.definitions),
            tabs=tuple(configuration.structure.tabs),
        )

    @staticmethod
    def merge(*configurations: SettingsConfiguration) -> SettingsConfiguration:
        """
        Combine configurations.

        The last definition per key wins, as does the last tab per id;
        each key keeps the position where it first appeared.
        """
        definitions: dict[str, SettingDefinition] = {}
        tabs: dict[str, SettingsTab] = {}
        for configuration in configurations:
            for definition in configuration.definitions:
                definitions[definition.key] = definition
            for tab in configuration.structure.tabs:
                tabs[tab.id] = tab

        return SettingsConfiguration(
            definitions=tuple(definitions.values()),
            structure=SettingsStructure(tabs=tuple(tabs.values())),
        )


# -----------------------------------------------------------------------------
# Setting definitions
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SettingBuilder:
    """A setting definition under construction."""

    parent: SettingsBuilder
    key: str
    value_type: SettingValueType | None = None
    default: SettingValue | None = None
    validate_fn: Validator | None = None
    relevance_fn: RelevanceFunction | None = None
    version_tag: str | None = None
    ui_config: SettingUIConfig | None = None

    def type(self, value_type: SettingValueType | str) -> SettingBuilder:
        return replace(self, value_type=SettingValueType(value_type))

    def default_value(self, value: SettingValue) -> SettingBuilder:
        return replace(self, default=value)

    def validator(self, validator: Validator) -> SettingBuilder:
        return replace(self, validate_fn=validator)

    def schema(self, annotation: Any) -> SettingBuilder:
        """Validate values against a pydantic-compatible annotation."""
        return replace(self, validate_fn=schema_validator(annotation))

    def depends_on(self, predicate: RelevanceFunction) -> SettingBuilder:
        """Set the definition-level relevance predicate."""
        return replace(self, relevance_fn=predicate)

    def version(self, version: str) -> SettingBuilder:
        return replace(self, version_tag=version)

    def ui(self, **fields: Any) -> SettingBuilder:
        """
        Update display configuration.

        Accepts any SettingUIConfig field; fields not given keep their
        current value.
        """
        current = self.ui_config or SettingUIConfig()
        return replace(self, ui_config=current.model_copy(update=fields))

    def _control(self, control_type: str, title: str, description: str, category: str | None,
                 **props: Any) -> SettingBuilder:
        fields: dict[str, Any] = {
            "title": title,
            "description": description,
            "control_type": control_type,
            "control_props": ControlProps(**props) if props else None,
        }
        if category is not None:
            fields["category"] = category
        return self.ui(**fields)

    def toggle(self, title: str, description: str = "", category: str | None = None) -> SettingBuilder:
        return self._control("toggle", title, description, category)

    def slider(
        self,
        title: str,
        description: str = "",
        *,
        min: float,
        max: float,
        step: float = 1,
        unit: str | None = None,
        category: str | None = None,
    ) -> SettingBuilder:
        return self._control(
            "slider", title, description, category, min=min, max=max, step=step, unit=unit
        )

    def select(
        self,
        title: str,
        options: Iterable[Any],
        description: str = "",
        category: str | None = None,
    ) -> SettingBuilder:
        """Select control; options are SelectOption, (label, value), dicts or strings."""
        return self._control(
            "select",
            title,
            description,
            category,
            options=tuple(_select_option(option) for option in options),
        )

    def color(
        self,
        title: str,
        description: str = "",
        *,
        show_alpha: bool = False,
        show_hex: bool = True,
        category: str | None = None,
    ) -> SettingBuilder:
        return self._control(
            "color", title, description, category, show_alpha=show_alpha, show_hex=show_hex
        )

    def input(self, title: str, description: str = "", category: str | None = None) -> SettingBuilder:
        return self._control("input", title, description, category)

    def dev(self) -> SettingBuilder:
        return self.ui(is_dev=True)

    def advanced(self) -> SettingBuilder:
        return self.ui(is_advanced=True)

    def order(self, order: int) -> SettingBuilder:
        return self.ui(order=order)

    # Transitions

    def finish(self) -> SettingsBuilder:
        """
        Validate this definition and hand it to the parent builder.

        Raises:
            IncompleteDefinitionError: If key, type or default is missing
            InvalidDefaultError: If the default fails the type or validator
        """
        check_complete(self.key, self.value_type, self.default)
        definition = validate_definition(
            SettingDefinition(
                key=self.key,
                type=self.value_type,
                default_value=self.default,
                validator=self.validate_fn,
                relevance=self.relevance_fn,
                version=self.version_tag,
                ui=self.ui_config,
            )
        )
        logger.debug(f"Defined setting {definition.key} ({definition.type.value})")
        return self.parent.add_definition(definition)

    def setting(self, key: str) -> SettingBuilder:
        return self.finish().setting(key)

    def tab(self, id: str, label: str, icon: str = "") -> TabBuilder:
        return self.finish().tab(id, label, icon)

    def build(self) -> SettingsConfiguration:
        return self.finish().build()

    def build_with_validation(self) -> SettingsConfiguration:
        return self.finish().build_with_validation()


# -----------------------------------------------------------------------------
# Structure
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class TabBuilder:
    """A tab under construction."""

    parent: SettingsBuilder
    id: str
    label: str
    icon: str = ""
    groups: tuple[SettingsGroup, ...] = ()
    is_constant: bool = False

    def constant(self) -> TabBuilder:
        """Mark the tab as always shown."""
        return replace(self, is_constant=True)

    def group(self, title: str, description: str | None = None) -> GroupBuilder:
        return GroupBuilder(parent=self, title=title, group_description=description)

    def add_group(self, group: SettingsGroup) -> TabBuilder:
        return replace(self, groups=self.groups + (group,))

    def finish(self) -> SettingsBuilder:
        """Hand the tab to the parent builder."""
        if not self.id or not self.label:
            raise DefinitionError(self.id or None, f"Incomplete tab definition: {self.id!r}")
        tab = SettingsTab(
            id=self.id,
            label=self.label,
            icon=self.icon,
            groups=self.groups,
            is_constant=self.is_constant,
        )
        return self.parent.add_tab(tab)

    def tab(self, id: str, label: str, icon: str = "") -> TabBuilder:
        return self.finish().tab(id, label, icon)

    def setting(self, key: str) -> SettingBuilder:
        return self.finish().setting(key)

    def build(self) -> SettingsConfiguration:
        return self.finish().build()

    def build_with_validation(self) -> SettingsConfiguration:
        return self.finish().build_with_validation()


@dataclass(frozen=True)
class GroupBuilder:
    """A group under construction."""

    parent: TabBuilder
    title: str
    group_description: str | None = None
    items: tuple[SettingStructureItem, ...] = field(default_factory=tuple)

    def description(self, text: str) -> GroupBuilder:
        return replace(self, group_description=text)

    def setting(
        self,
        key: str,
        overrides: Mapping[str, Any] | None = None,
        relevance: RelevanceFunction | None = None,
        order: int | None = None,
    ) -> GroupBuilder:
        """Reference a setting, optionally with display overrides and its own relevance."""
        item = SettingStructureItem(
            key=key,
            order=order,
            overrides=dict(overrides) if overrides else None,
            relevance=relevance,
        )
        return replace(self, items=self.items + (item,))

    def settings(self, keys: Iterable[str]) -> TabBuilder:
        """Reference several settings and finish the group."""
        items = self.items + tuple(SettingStructureItem(key=key) for key in keys)
        return replace(self, items=items).finish()

    def finish(self) -> TabBuilder:
        """Hand the group to the parent tab."""
        if not self.title or not self.items:
            raise DefinitionError(None, f"Incomplete group definition: {self.title!r}")
        group = SettingsGroup(
            title=self.title,
            description=self.group_description,
            settings=self.items,
        )
        return self.parent.add_group(group)

    def group(self, title: str, description: str | None = None) -> GroupBuilder:
        return self.finish().group(title, description)

    def tab(self, id: str, label: str, icon: str = "") -> TabBuilder:
        return self.finish().tab(id, label, icon)

    def build(self) -> SettingsConfiguration:
        return self.finish().build()

    def build_with_validation(self) -> SettingsConfiguration:
        return self.finish().build_with_validation()
