"""
Relevance Engine

Pure evaluation of relevance predicates over a value snapshot, plus
whole-graph analyses (dependents, cycle validation, dependency order).

A setting is relevant when both its definition-level predicate and its
structure-level predicate pass; a missing predicate (or a key with no
definition or structure item) counts as passing. The engine never mutates
anything and performs no I/O.

Dependency Discovery:
    Condition trees (pitz.relevance.conditions) report the keys they read
    exactly. Any other callable is scanned heuristically: the source text
    of a def-function is searched for quoted/bracketed occurrences of the
    key, and the string constants and closure values of its code object
    (lambdas included) are compared with the key.
    The heuristic misses keys reached through indirection (computed key
    names, helper functions defined elsewhere) and may report coincidental
    literals. It only feeds diagnostics and ordering, never evaluation.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Protocol

from pitz.relevance.conditions import Condition
from pitz.types.results import RelevanceValidationResult
from pitz.types.structure import SettingsStructure
from pitz.types.values import RelevanceFunction, SettingValue
from pitz.utils.graph import cycle_participants, dependency_order, find_cycles

logger = logging.getLogger(__name__)

_SOURCE_PATTERNS = ('["{key}"]', "['{key}']", '"{key}"', "'{key}'")

# Upper bound on how many nested callables the heuristic inspects
_MAX_INSPECT_DEPTH = 8


class _HasRelevance(Protocol):
    key: str
    relevance: RelevanceFunction | None


# -----------------------------------------------------------------------------
# Dependency discovery
# -----------------------------------------------------------------------------


def references_setting(predicate: RelevanceFunction | None, key: str) -> bool:
    """
    Check whether a relevance predicate reads a setting key.

    Exact for Condition trees (opaque Custom nodes excluded), best-effort
    for any other callable. See the module docstring for the heuristic's
    limitations.
    """
    if predicate is None:
        return False
    if isinstance(predicate, Condition):
        return key in predicate.known_references()
    return _heuristic_references(predicate, key, set(), 0)


def _predicate_source(fn: Any) -> str | None:
    # getsource() on a lambda returns its whole enclosing statement, which
    # drags in unrelated literals; lambdas are covered by their constants.
    if getattr(fn, "__name__", None) == "<lambda>":
        return None
    try:
        return inspect.getsource(fn)
    except (OSError, TypeError):
        return None


def _code_strings(code: Any) -> set[str]:
    """String constants of a code object and its nested code objects."""
    strings: set[str] = set()
    for const in code.co_consts:
        if isinstance(const, str):
            strings.add(const)
        elif inspect.iscode(const):
            strings |= _code_strings(const)
    return strings


def _heuristic_references(fn: Any, key: str, seen: set[int], depth: int) -> bool:
    if id(fn) in seen or depth > _MAX_INSPECT_DEPTH:
        return False
    seen.add(id(fn))

    if isinstance(fn, Condition):
        return key in fn.known_references()

    if isinstance(fn, functools.partial):
        if any(arg == key for arg in (*fn.args, *fn.keywords.values())):
            return True
        return _heuristic_references(fn.func, key, seen, depth + 1)

    wrapped = getattr(fn, "__wrapped__", None)
    if wrapped is not None and _heuristic_references(wrapped, key, seen, depth + 1):
        return True

    source = _predicate_source(fn)
    if source is not None and any(p.format(key=key) in source for p in _SOURCE_PATTERNS):
        return True

    code = getattr(fn, "__code__", None)
    if code is None:
        # Callable object: inspect its __call__
        call = getattr(type(fn), "__call__", None)
        code = getattr(call, "__code__", None)
        if code is None:
            return False

    if key in _code_strings(code):
        return True

    for cell in getattr(fn, "__closure__", None) or ():
        try:
            value = cell.cell_contents
        except ValueError:  # empty cell
            continue
        items = value if isinstance(value, (tuple, list, set, frozenset)) else (value,)
        for item in items:
            if isinstance(item, str) and item == key:
                return True
            if callable(item) and _heuristic_references(item, key, seen, depth + 1):
                return True

    return False


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------


class RelevanceEngine:
    """
    Pure query layer over definitions, structure and a value snapshot.

    Usage:
        visible = RelevanceEngine.get_visible_settings(
            config.structure, config.definitions, store.values
        )
        result = RelevanceEngine.validate_relevance_tree(
            config.structure, config.definitions
        )
    """

    @staticmethod
    def _definition_lookup(definitions: Iterable[_HasRelevance]) -> dict[str, _HasRelevance]:
        lookup: dict[str, _HasRelevance] = {}
        for definition in definitions:
            lookup.setdefault(definition.key, definition)
        return lookup

    @staticmethod
    def evaluate(
        key: str,
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
        values: Mapping[str, SettingValue],
    ) -> bool:
        """
        Decide whether a setting is currently relevant.

        Returns False if the definition-level or the structure-level
        predicate exists and returns False; True otherwise.
        """
        definition = RelevanceEngine._definition_lookup(definitions).get(key)
        return RelevanceEngine._evaluate_with(key, structure, definition, values)

    @staticmethod
    def _evaluate_with(
        key: str,
        structure: SettingsStructure,
        definition: _HasRelevance | None,
        values: Mapping[str, SettingValue],
    ) -> bool:
        if definition is not None and definition.relevance is not None:
            if not definition.relevance(values):
                return False

        item = structure.find(key)
        if item is not None and item.relevance is not None:
            if not item.relevance(values):
                return False

        return True

    @staticmethod
    def get_visible_settings(
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
        values: Mapping[str, SettingValue],
    ) -> list[str]:
        """Every structure key that is currently relevant, in structure order."""
        lookup = RelevanceEngine._definition_lookup(definitions)
        return [
            key
            for key in structure.keys()
            if RelevanceEngine._evaluate_with(key, structure, lookup.get(key), values)
        ]

    @staticmethod
    def batch_evaluate(
        keys: Iterable[str],
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
        values: Mapping[str, SettingValue],
    ) -> dict[str, bool]:
        """Evaluate relevance for several keys at once."""
        lookup = RelevanceEngine._definition_lookup(definitions)
        return {
            key: RelevanceEngine._evaluate_with(key, structure, lookup.get(key), values)
            for key in keys
        }

    @staticmethod
    def get_dependent_settings(
        changed_key: str,
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
    ) -> list[str]:
        """
        Structure keys whose relevance predicate reads changed_key.

        Heuristic for plain callables (see module docstring).
        """
        lookup = RelevanceEngine._definition_lookup(definitions)
        return RelevanceEngine._dependents(changed_key, structure, lookup)

    @staticmethod
    def _dependents(
        changed_key: str,
        structure: SettingsStructure,
        lookup: Mapping[str, _HasRelevance],
    ) -> list[str]:
        dependents: list[str] = []
        for key in structure.keys():
            definition = lookup.get(key)
            item = structure.find(key)
            if references_setting(
                definition.relevance if definition is not None else None, changed_key
            ) or references_setting(item.relevance if item is not None else None, changed_key):
                dependents.append(key)
        return dependents

    @staticmethod
    def get_relevance_tree(
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
    ) -> dict[str, list[str]]:
        """Map each structure key to the keys that depend on it."""
        lookup = RelevanceEngine._definition_lookup(definitions)
        return {
            key: RelevanceEngine._dependents(key, structure, lookup)
            for key in structure.keys()
        }

    @staticmethod
    def validate_relevance_tree(
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
    ) -> RelevanceValidationResult:
        """
        Check the relevance graph for circular dependencies.

        Each distinct cycle participant is reported once. Non-fatal: the
        result is returned, never raised.
        """
        tree = RelevanceEngine.get_relevance_tree(structure, definitions)
        cycles = find_cycles(tree)
        errors = [
            f"Circular dependency detected involving setting: {key}"
            for key in cycle_participants(cycles)
        ]
        for error in errors:
            logger.warning(error)
        return RelevanceValidationResult(valid=not errors, errors=errors, cycles=cycles)

    @staticmethod
    def get_dependency_order(
        structure: SettingsStructure,
        definitions: Iterable[_HasRelevance],
    ) -> list[str]:
        """
        Structure keys ordered so dependencies precede their dependents.

        Terminates on cyclic graphs without raising; call
        validate_relevance_tree() first for a hard guarantee.
        """
        tree = RelevanceEngine.get_relevance_tree(structure, definitions)
        return dependency_order(tree, structure.keys())
