"""
Relevance Conditions

Relevance predicates as a small tagged expression tree.

Every node is a frozen pydantic model that is also callable as
``condition(values) -> bool``, so a condition can be used anywhere a plain
relevance function is accepted. Unlike an opaque closure, a condition
tree knows which keys it reads: ``references()`` returns them exactly,
which turns dependency discovery into plain tree traversal.

Node Types:
    Leaves:      DependsOn, Equals, NotEquals, GreaterThan, LessThan,
                 InRange, OneOf, NoneOf, Always, Never
    Combinators: AllOf, AnyOf, Not
    Escape hatch: Custom - wraps an opaque function; it never contributes
                 to dependency discovery

Comparison leaves return False (never raise) when the key is missing or
holds a value of the wrong type.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from pitz.types.values import RelevanceFunction, SettingValue


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Condition(BaseModel):
    """Base class for relevance condition nodes."""

    model_config = ConfigDict(frozen=True)

    def __call__(self, values: Mapping[str, SettingValue]) -> bool:
        return self.evaluate(values)

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        raise NotImplementedError

    def references(self) -> frozenset[str] | None:
        """
        Keys this condition reads from the snapshot.

        Returns None when the tree contains an opaque Custom node, meaning
        the exact set is unknown; use known_references() for the partial set.
        """
        return frozenset()

    def known_references(self) -> frozenset[str]:
        """Keys read by the non-opaque parts of the tree."""
        return self.references() or frozenset()

    def __and__(self, other: Condition) -> AllOf:
        return AllOf(conditions=(self, other))

    def __or__(self, other: Condition) -> AnyOf:
        return AnyOf(conditions=(self, other))

    def __invert__(self) -> Not:
        return Not(condition=self)


# -----------------------------------------------------------------------------
# Leaves
# -----------------------------------------------------------------------------


class _KeyCondition(Condition):
    key: str

    def references(self) -> frozenset[str] | None:
        return frozenset({self.key})


class DependsOn(_KeyCondition):
    """Relevant when another setting is truthy."""

    kind: Literal["depends_on"] = "depends_on"

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return bool(values.get(self.key))


class Equals(_KeyCondition):
    """Relevant when another setting equals a value."""

    kind: Literal["equals"] = "equals"
    value: SettingValue

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return self.key in values and values[self.key] == self.value


class NotEquals(_KeyCondition):
    """Relevant when another setting does not equal a value."""

    kind: Literal["not_equals"] = "not_equals"
    value: SettingValue

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return not (self.key in values and values[self.key] == self.value)


class GreaterThan(_KeyCondition):
    kind: Literal["greater_than"] = "greater_than"
    value: float

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        current = values.get(self.key)
        return _is_number(current) and current > self.value


class LessThan(_KeyCondition):
    kind: Literal["less_than"] = "less_than"
    value: float

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        current = values.get(self.key)
        return _is_number(current) and current < self.value


class InRange(_KeyCondition):
    """Relevant when a numeric setting lies in [min, max]."""

    kind: Literal["in_range"] = "in_range"
    min: float
    max: float

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        current = values.get(self.key)
        return _is_number(current) and self.min <= current <= self.max


class OneOf(_KeyCondition):
    kind: Literal["one_of"] = "one_of"
    values: tuple[SettingValue, ...]

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return self.key in values and values[self.key] in self.values


class NoneOf(_KeyCondition):
    kind: Literal["none_of"] = "none_of"
    values: tuple[SettingValue, ...]

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return not (self.key in values and values[self.key] in self.values)


class Always(Condition):
    kind: Literal["always"] = "always"

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return True


class Never(Condition):
    kind: Literal["never"] = "never"

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return False


# -----------------------------------------------------------------------------
# Combinators
# -----------------------------------------------------------------------------


class _Compound(Condition):
    conditions: tuple[Condition, ...]

    def references(self) -> frozenset[str] | None:
        keys: set[str] = set()
        opaque = False
        for condition in self.conditions:
            refs = condition.references()
            if refs is None:
                opaque = True
                keys |= condition.known_references()
            else:
                keys |= refs
        return None if opaque else frozenset(keys)

    def known_references(self) -> frozenset[str]:
        keys: set[str] = set()
        for condition in self.conditions:
            keys |= condition.known_references()
        return frozenset(keys)


class AllOf(_Compound):
    """AND of all child conditions (vacuously True)."""

    kind: Literal["all_of"] = "all_of"

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return all(condition(values) for condition in self.conditions)


class AnyOf(_Compound):
    """OR of all child conditions (vacuously False)."""

    kind: Literal["any_of"] = "any_of"

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return any(condition(values) for condition in self.conditions)


class Not(Condition):
    kind: Literal["not"] = "not"
    condition: Condition

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return not self.condition(values)

    def references(self) -> frozenset[str] | None:
        return self.condition.references()

    def known_references(self) -> frozenset[str]:
        return self.condition.known_references()


class Custom(Condition):
    """
    Opaque predicate with a stable identifier.

    Excluded from dependency discovery: references() is None and
    known_references() is empty.
    """

    kind: Literal["custom"] = "custom"
    id: str
    fn: RelevanceFunction

    def evaluate(self, values: Mapping[str, SettingValue]) -> bool:
        return bool(self.fn(values))

    def references(self) -> frozenset[str] | None:
        return None

    def known_references(self) -> frozenset[str]:
        return frozenset()
