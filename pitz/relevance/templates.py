"""
Relevance Templates

Ready-made relevance conditions for common patterns, and wrappers for
hand-written predicate functions.

Templates return Condition trees, so settings built from them get exact
dependency discovery. RelevanceUtils wrappers keep the wrapped function
reachable through ``__wrapped__`` so heuristic discovery still sees it.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping

from pitz.relevance.conditions import (
    AllOf,
    Always,
    AnyOf,
    Condition,
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
from pitz.types.values import RelevanceFunction, SettingValue

logger = logging.getLogger(__name__)

LICENSE_LEVELS = ("free", "basic", "pro", "enterprise")


class RelevanceTemplates:
    """Factory functions for common relevance conditions."""

    # === Generic ===

    @staticmethod
    def depends_on(parent_key: str) -> Condition:
        """Relevant when another setting is truthy."""
        return DependsOn(key=parent_key)

    @staticmethod
    def equals(key: str, value: SettingValue) -> Condition:
        return Equals(key=key, value=value)

    @staticmethod
    def not_equals(key: str, value: SettingValue) -> Condition:
        return NotEquals(key=key, value=value)

    @staticmethod
    def greater_than(key: str, value: float) -> Condition:
        return GreaterThan(key=key, value=value)

    @staticmethod
    def less_than(key: str, value: float) -> Condition:
        return LessThan(key=key, value=value)

    @staticmethod
    def in_range(key: str, min: float, max: float) -> Condition:
        """Relevant when a numeric setting lies within [min, max]."""
        return InRange(key=key, min=min, max=max)

    @staticmethod
    def one_of(key: str, values: list[SettingValue]) -> Condition:
        return OneOf(key=key, values=tuple(values))

    @staticmethod
    def none_of(key: str, values: list[SettingValue]) -> Condition:
        return NoneOf(key=key, values=tuple(values))

    @staticmethod
    def all_of(*conditions: Condition) -> Condition:
        return AllOf(conditions=conditions)

    @staticmethod
    def any_of(*conditions: Condition) -> Condition:
        return AnyOf(conditions=conditions)

    @staticmethod
    def not_(condition: Condition) -> Condition:
        return Not(condition=condition)

    @staticmethod
    def always() -> Condition:
        return Always()

    @staticmethod
    def never() -> Condition:
        """Never relevant (for disabling settings)."""
        return Never()

    # === Graphics ===

    @staticmethod
    def post_processing_enabled() -> Condition:
        return DependsOn(key="graphics.postProcessing.enabled")

    @staticmethod
    def bloom_enabled() -> Condition:
        """Bloom requires post-processing to be enabled as well."""
        return AllOf(
            conditions=(
                DependsOn(key="graphics.postProcessing.enabled"),
                DependsOn(key="graphics.postProcessing.bloom.enabled"),
            )
        )

    @staticmethod
    def performance_mode(mode: str) -> Condition:
        return Equals(key="graphics.performance.mode", value=mode)

    # === Gameplay ===

    @staticmethod
    def is_guided() -> Condition:
        return Equals(key="projectile.type", value="guided")

    @staticmethod
    def is_passive() -> Condition:
        return Equals(key="projectile.type", value="passive")

    # === Modes and flags ===

    @staticmethod
    def advanced_mode() -> Condition:
        return DependsOn(key="ui.advanced.enabled")

    @staticmethod
    def debug_mode() -> Condition:
        return DependsOn(key="debug.enabled")

    @staticmethod
    def experimental_enabled() -> Condition:
        return DependsOn(key="experimental.enabled")

    @staticmethod
    def beta_enabled() -> Condition:
        return DependsOn(key="beta.enabled")

    @staticmethod
    def feature_enabled(feature: str) -> Condition:
        return DependsOn(key=f"features.{feature}.enabled")

    # === Platform and device ===

    @staticmethod
    def platform(name: str) -> Condition:
        return Equals(key="system.platform", value=name)

    @staticmethod
    def is_mobile() -> Condition:
        return DependsOn(key="device.isMobile")

    @staticmethod
    def has_touch_interface() -> Condition:
        return DependsOn(key="device.hasTouch")

    @staticmethod
    def min_screen_width(width: float) -> Condition:
        return InRange(key="device.screenWidth", min=width, max=float("inf"))

    # === User and licensing ===

    @staticmethod
    def has_role(role: str) -> Condition:
        return Equals(key="user.role", value=role)

    @staticmethod
    def license_level(min_level: str) -> Condition:
        """
        Relevant when the license is at least min_level.

        Levels: free < basic < pro < enterprise. An unknown min_level
        places no restriction.
        """
        if min_level not in LICENSE_LEVELS:
            return Always()
        index = LICENSE_LEVELS.index(min_level)
        return OneOf(key="license.level", values=LICENSE_LEVELS[index:])

    # === Appearance and accessibility ===

    @staticmethod
    def theme(name: str) -> Condition:
        return Equals(key="ui.theme", value=name)

    @staticmethod
    def language(code: str) -> Condition:
        return Equals(key="ui.language", value=code)

    @staticmethod
    def accessibility_mode() -> Condition:
        return DependsOn(key="accessibility.enabled")

    @staticmethod
    def high_contrast() -> Condition:
        return DependsOn(key="accessibility.highContrast")

    @staticmethod
    def reduced_motion() -> Condition:
        return DependsOn(key="accessibility.reducedMotion")


class RelevanceUtils:
    """Wrappers for hand-written relevance functions."""

    @staticmethod
    def safe(fn: RelevanceFunction, default: bool = True) -> RelevanceFunction:
        """Return default (visible) instead of raising when fn fails."""

        @functools.wraps(fn)
        def wrapper(values: Mapping[str, SettingValue]) -> bool:
            try:
                return bool(fn(values))
            except Exception:
                logger.exception("Relevance function failed, using default")
                return default

        return wrapper

    @staticmethod
    def cached(fn: RelevanceFunction, maxsize: int = 128) -> RelevanceFunction:
        """Memoise fn on the snapshot's contents, keeping the maxsize most recent results."""

        @functools.lru_cache(maxsize=maxsize)
        def evaluate(fingerprint: frozenset[tuple[str, SettingValue]]) -> bool:
            return bool(fn(dict(fingerprint)))

        @functools.wraps(fn)
        def wrapper(values: Mapping[str, SettingValue]) -> bool:
            return evaluate(frozenset(values.items()))

        wrapper.cache_info = evaluate.cache_info  # type: ignore[attr-defined]
        return wrapper

    @staticmethod
    def compose(*fns: RelevanceFunction) -> RelevanceFunction:
        """AND of several predicates, short-circuiting."""

        def composed(values: Mapping[str, SettingValue]) -> bool:
            return all(fn(values) for fn in fns)

        return composed

    @staticmethod
    def logged(fn: RelevanceFunction, label: str | None = None) -> RelevanceFunction:
        """Log every evaluation at debug level."""

        @functools.wraps(fn)
        def wrapper(values: Mapping[str, SettingValue]) -> bool:
            result = bool(fn(values))
            logger.debug(f"Relevance {label or 'function'}: {result}")
            return result

        return wrapper
