"""
Controller Resolution

Turns an assembled configuration into store controllers, applying each
structure item's display overrides on top of its definition's UI config.
"""

from __future__ import annotations

from pitz.types.definitions import SettingController
from pitz.types.structure import SettingsConfiguration


def resolve_controllers(configuration: SettingsConfiguration) -> list[SettingController]:
    """
    Build one controller per definition, in definition order.

    Structure-item overrides take precedence over the definition's UI
    config; a structure item's explicit order wins over both.
    """
    controllers = []
    for definition in configuration.definitions:
        item = configuration.structure.find(definition.key)
        overrides = dict(item.overrides or {}) if item is not None else {}
        if item is not None and item.order is not None:
            overrides["order"] = item.order
        controllers.append(SettingController.from_definition(definition, overrides))
    return controllers
