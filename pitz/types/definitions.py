"""
Definition Types

Inert data describing each setting.

Storage Models:
    - SettingDefinition: Key, type, default and optional validator/relevance
    - SettingController: Runtime-registered form with resolved display metadata

Presentation Models:
    - SettingUIConfig, ControlProps, SelectOption
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from pitz.types.values import RelevanceFunction, SettingValue, SettingValueType, Validator

ControlType = Literal["slider", "toggle", "select", "input", "color"]


class SelectOption(BaseModel):
    """One choice of a select control."""

    label: str
    value: str

    model_config = ConfigDict(frozen=True)


class ControlProps(BaseModel):
    """Control-specific display properties."""

    min: float | None = None
    max: float | None = None
    step: float | None = None
    unit: str | None = None
    options: tuple[SelectOption, ...] | None = None
    show_alpha: bool | None = None
    show_hex: bool | None = None
    show_rgb: bool | None = None
    show_hsl: bool | None = None

    model_config = ConfigDict(frozen=True)


class SettingUIConfig(BaseModel):
    """Display configuration for a setting."""

    title: str = ""
    description: str = ""
    category: str = "General"
    tab: str | None = None
    order: int | None = None
    is_dev: bool = False
    is_advanced: bool = False
    control_type: ControlType | None = None
    control_props: ControlProps | None = None

    model_config = ConfigDict(frozen=True)


class SettingDefinition(BaseModel):
    """
    Immutable declaration of a setting.

    Attributes:
        key: Namespaced identifier (e.g., "graphics.quality")
        type: Declared value type
        default_value: Value used when nothing valid is persisted
        validator: Optional callable that raises or returns False on bad input
        relevance: Optional predicate deciding when the setting is active
        version: Carried for future migration hooks, not interpreted
        ui: Optional display configuration

    Invariant (checked by pitz.assembly.validation, not here):
        default_value matches type and satisfies validator.
    """

    key: str
    type: SettingValueType
    default_value: SettingValue
    validator: Validator | None = None
    relevance: RelevanceFunction | None = None
    version: str | None = None
    ui: SettingUIConfig | None = None

    model_config = ConfigDict(frozen=True)


class SettingController(BaseModel):
    """
    A setting registered with a SettingsStore.

    Carries the definition's data and validation rules together with the
    display metadata resolved from its UI config and any structure overrides.
    One controller per key; registering the same key again replaces it.
    """

    key: str
    type: SettingValueType
    default_value: SettingValue
    validator: Validator | None = None
    relevance: RelevanceFunction | None = None
    version: str | None = None

    title: str = ""
    description: str = ""
    category: str = "General"
    tab: str | None = None
    order: int | None = None
    is_dev: bool = False
    is_advanced: bool = False
    control_type: ControlType | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    unit: str | None = None
    options: tuple[SelectOption, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_definition(
        cls,
        definition: SettingDefinition,
        overrides: dict[str, Any] | None = None,
    ) -> SettingController:
        """
        Build a controller from a definition.

        Args:
            definition: The setting definition
            overrides: Partial UI config (e.g., from a structure item) layered
                on top of the definition's own UI config

        Returns:
            SettingController with flattened display metadata
        """
        ui = definition.ui.model_dump(exclude_none=True) if definition.ui else {}
        if overrides:
            ui.update({k: v for k, v in overrides.items() if v is not None})

        props = ui.pop("control_props", None) or {}
        if isinstance(props, ControlProps):
            props = props.model_dump(exclude_none=True)

        return cls(
            key=definition.key,
            type=definition.type,
            default_value=definition.default_value,
            validator=definition.validator,
            relevance=definition.relevance,
            version=definition.version,
            title=ui.get("title") or definition.key,
            description=ui.get("description", ""),
            category=ui.get("category", "General"),
            tab=ui.get("tab"),
            order=ui.get("order"),
            is_dev=ui.get("is_dev", False),
            is_advanced=ui.get("is_advanced", False),
            control_type=ui.get("control_type"),
            min=props.get("min"),
            max=props.get("max"),
            step=props.get("step"),
            unit=props.get("unit"),
            options=tuple(props.get("options") or ()),
        )
