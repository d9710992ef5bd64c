"""
Pitz - Typed Application Settings with Conditional Relevance

A pip-installable Python library for declaring named, typed settings,
grouping them for presentation, and deciding which settings are active
based on the values of others.

Example:
    >>> from pitz import SettingsBuilder, SettingsStore, RelevanceTemplates
    >>> config = (
    ...     SettingsBuilder()
    ...     .setting("audio.enabled").type("boolean").default_value(True)
    ...     .toggle("Audio", "Play sounds")
    ...     .setting("audio.volume").type("number").default_value(50)
    ...     .slider("Volume", "Master volume", min=0, max=100)
    ...     .depends_on(RelevanceTemplates.depends_on("audio.enabled"))
    ...     .tab("audio", "Audio")
    ...     .group("Output").settings(["audio.enabled", "audio.volume"])
    ...     .build()
    ... )
    >>> store = SettingsStore()
    >>> await store.initialize(resolve_controllers(config))
    >>> await store.set_value("audio.enabled", False)

Main Classes:
    SettingsStore: Validated, persisted, throttled value store
    RelevanceEngine: Relevance evaluation and dependency analysis
    SettingsBuilder: Immutable configuration assembler
    PitzConfig: Configuration management
"""

__version__ = "0.2.0"


# Public API - lazy imports to avoid loading optional dependencies
def __getattr__(name: str):
    """Lazy import public API components."""

    if name == "SettingsStore":
        from pitz.store.settings_store import SettingsStore
        return SettingsStore

    if name == "RelevanceEngine":
        from pitz.relevance.engine import RelevanceEngine
        return RelevanceEngine

    if name in ("RelevanceTemplates", "RelevanceUtils"):
        from pitz.relevance import templates
        return getattr(templates, name)

    if name == "SettingsBuilder":
        from pitz.assembly.builder import SettingsBuilder
        return SettingsBuilder

    if name in ("resolve_controllers", "schema"):
        from pitz import assembly
        return getattr(assembly, name)

    if name == "PitzConfig":
        from pitz.config.settings import PitzConfig
        return PitzConfig

    # Storage adapters
    if name in ("SettingsStorage", "MemoryStorage", "JsonFileStorage", "DuckDBStorage", "create_storage"):
        from pitz import storage
        return getattr(storage, name)

    # Types
    if name in (
        "SettingDefinition",
        "SettingController",
        "SettingsConfiguration",
        "SettingsStructure",
        "SettingValueType",
    ):
        from pitz import types
        return getattr(types, name)

    raise AttributeError(f"module 'pitz' has no attribute {name!r}")


__all__ = [
    # Main classes
    "SettingsStore",
    "RelevanceEngine",
    "RelevanceTemplates",
    "RelevanceUtils",
    "SettingsBuilder",
    "PitzConfig",
    "resolve_controllers",
    "schema",

    # Storage
    "SettingsStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "DuckDBStorage",
    "create_storage",

    # Types
    "SettingDefinition",
    "SettingController",
    "SettingsConfiguration",
    "SettingsStructure",
    "SettingValueType",

    # Version
    "__version__",
]
