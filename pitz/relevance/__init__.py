"""
Relevance

Decides which settings are currently active given the values of others.

Modules:
    conditions: Tagged expression tree (DependsOn, Equals, AllOf, Custom, ...)
    engine: RelevanceEngine - evaluation, dependents, cycles, ordering
    templates: RelevanceTemplates and RelevanceUtils

Two predicate layers:
    - Definition-level: SettingDefinition.relevance
    - Structure-level: SettingStructureItem.relevance
    Both must pass for a setting to be relevant.
"""

from pitz.relevance.conditions import (
    AllOf,
    Always,
    AnyOf,
    Condition,
    Custom,
    DependsOn,
    Equals,
    GreaterThan,
    InRange,
    LessThan,
    Never,
    NoneOf,
    Not,
    NotEquals,
    OneOf,
)
from pitz.relevance.engine import RelevanceEngine, references_setting
from pitz.relevance.templates import RelevanceTemplates, RelevanceUtils

__all__ = [
    "RelevanceEngine",
    "references_setting",
    "RelevanceTemplates",
    "RelevanceUtils",
    # Conditions
    "Condition",
    "DependsOn",
    "Equals",
    "NotEquals",
    "GreaterThan",
    "LessThan",
    "InRange",
    "OneOf",
    "NoneOf",
    "AllOf",
    "AnyOf",
    "Not",
    "Always",
    "Never",
    "Custom",
]
