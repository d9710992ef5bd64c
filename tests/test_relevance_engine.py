"""Tests for RelevanceEngine evaluation and graph analyses."""

import functools

import pytest

from pitz.relevance import (
    Custom,
    DependsOn,
    Equals,
    RelevanceEngine,
    RelevanceTemplates,
    RelevanceUtils,
    references_setting,
)
from pitz.types import (
    SettingDefinition,
    SettingsGroup,
    SettingsStructure,
    SettingsTab,
    SettingStructureItem,
)


def _definition(key, relevance=None, value_type="boolean", default=True):
    return SettingDefinition(key=key, type=value_type, default_value=default, relevance=relevance)


def _structure(*items: SettingStructureItem) -> SettingsStructure:
    return SettingsStructure(
        tabs=(
            SettingsTab(
                id="main",
                label="Main",
                groups=(SettingsGroup(title="All", settings=items),),
            ),
        )
    )


def _items(*keys: str) -> tuple[SettingStructureItem, ...]:
    return tuple(SettingStructureItem(key=k) for k in keys)


@pytest.fixture
def audio():
    """audio.volume is relevant only while audio.enabled is truthy."""
    definitions = [
        _definition("audio.enabled"),
        _definition(
            "audio.volume",
            relevance=RelevanceTemplates.depends_on("audio.enabled"),
            value_type="number",
            default=50,
        ),
    ]
    return _structure(*_items("audio.enabled", "audio.volume")), definitions


class TestEvaluate:
    """Test single-key relevance evaluation."""

    def test_audio_scenario(self, audio):
        """Volume follows the enabled flag."""
        structure, definitions = audio

        assert RelevanceEngine.evaluate(
            "audio.volume", structure, definitions, {"audio.enabled": True, "audio.volume": 50}
        )
        assert not RelevanceEngine.evaluate(
            "audio.volume", structure, definitions, {"audio.enabled": False, "audio.volume": 50}
        )

    def test_missing_key_is_relevant(self, audio):
        """Keys without a definition or structure item are relevant."""
        structure, definitions = audio
        assert RelevanceEngine.evaluate("no.such.key", structure, definitions, {})

    def test_and_semantics(self):
        """Definition and structure predicates must both pass."""
        definitions = [_definition("x", relevance=DependsOn(key="a"))]
        structure = _structure(SettingStructureItem(key="x", relevance=DependsOn(key="b")))

        def relevant(values):
            return RelevanceEngine.evaluate("x", structure, definitions, values)

        assert relevant({"a": True, "b": True})
        assert not relevant({"a": True, "b": False})
        assert not relevant({"a": False, "b": True})
        assert not relevant({})

    def test_plain_function_predicates(self):
        """Any callable over the snapshot is a valid predicate."""
        definitions = [_definition("x", relevance=lambda values: values.get("n", 0) > 3)]
        structure = _structure(*_items("x"))

        assert RelevanceEngine.evaluate("x", structure, definitions, {"n": 4})
        assert not RelevanceEngine.evaluate("x", structure, definitions, {"n": 1})

    def test_predicate_errors_propagate(self):
        """A failing predicate raises unless wrapped with RelevanceUtils.safe."""
        def broken(values):
            raise KeyError("boom")

        structure = _structure(*_items("x"))

        with pytest.raises(KeyError):
            RelevanceEngine.evaluate("x", structure, [_definition("x", relevance=broken)], {})

        safe = [_definition("x", relevance=RelevanceUtils.safe(broken, default=False))]
        assert not RelevanceEngine.evaluate("x", structure, safe, {})


class TestVisibleSettings:
    """Test visible-settings queries."""

    def test_filters_by_relevance(self, audio):
        """Irrelevant settings are excluded."""
        structure, definitions = audio

        assert RelevanceEngine.get_visible_settings(
            structure, definitions, {"audio.enabled": True}
        ) == ["audio.enabled", "audio.volume"]
        assert RelevanceEngine.get_visible_settings(
            structure, definitions, {"audio.enabled": False}
        ) == ["audio.enabled"]

    def test_deterministic(self, audio):
        """Repeated calls on the same snapshot return identical results."""
        structure, definitions = audio
        values = {"audio.enabled": True}

        first = RelevanceEngine.get_visible_settings(structure, definitions, values)
        second = RelevanceEngine.get_visible_settings(structure, definitions, values)
        assert first == second

    def test_batch_evaluate(self, audio):
        """batch_evaluate maps each key to its relevance."""
        structure, definitions = audio

        result = RelevanceEngine.batch_evaluate(
            ["audio.enabled", "audio.volume"], structure, definitions, {"audio.enabled": False}
        )
        assert result == {"audio.enabled": True, "audio.volume": False}


class TestDependencyDiscovery:
    """Test exact and heuristic discovery of referenced keys."""

    def test_condition_references(self):
        """Condition trees report their keys exactly."""
        predicate = DependsOn(key="a") & Equals(key="b", value=1)

        assert references_setting(predicate, "a")
        assert references_setting(predicate, "b")
        assert not references_setting(predicate, "c")

    def test_custom_excluded(self):
        """Custom nodes are not scanned."""
        predicate = Custom(id="x", fn=lambda values: values["a"])
        assert not references_setting(predicate, "a")

    def test_lambda_subscript(self):
        """Key literals inside a lambda are found."""
        predicate = lambda values: values["graphics.quality"] == "high"  # noqa: E731
        assert references_setting(predicate, "graphics.quality")
        assert not references_setting(predicate, "graphics")

    def test_function_source(self):
        """Quoted keys in a function's source are found."""
        def predicate(values):
            return values.get('audio.enabled', False)

        assert references_setting(predicate, "audio.enabled")

    def test_closure_value(self):
        """Keys captured in a closure are found."""
        def make(key):
            return lambda values: bool(values.get(key))

        assert references_setting(make("feature.x"), "feature.x")

    def test_wrapped_and_partial(self):
        """Wrappers and partials are looked through."""
        def reads(values, key):
            return bool(values.get(key))

        assert references_setting(functools.partial(reads, key="a.b"), "a.b")
        assert references_setting(RelevanceUtils.logged(lambda v: v["x.y"]), "x.y")

    def test_compose(self):
        """Composed predicates expose their parts."""
        composed = RelevanceUtils.compose(lambda v: v["p"], DependsOn(key="q"))

        assert references_setting(composed, "p")
        assert references_setting(composed, "q")

    def test_indirection_is_missed(self):
        """Computed key names are a documented false negative."""
        prefix = "audio"
        predicate = lambda values: values.get(prefix + ".enabled")  # noqa: E731
        assert not references_setting(predicate, "audio.enabled")

    def test_none_predicate(self):
        """A missing predicate references nothing."""
        assert not references_setting(None, "a")

    def test_dependent_settings(self, audio):
        """Dependents of audio.enabled include audio.volume."""
        structure, definitions = audio

        assert RelevanceEngine.get_dependent_settings(
            "audio.enabled", structure, definitions
        ) == ["audio.volume"]
        assert RelevanceEngine.get_dependent_settings("audio.volume", structure, definitions) == []

    def test_structure_level_dependents(self):
        """Structure-item predicates count as dependencies too."""
        structure = _structure(
            SettingStructureItem(key="a"),
            SettingStructureItem(key="b", relevance=DependsOn(key="a")),
        )
        assert RelevanceEngine.get_dependent_settings("a", structure, []) == ["b"]

    def test_relevance_tree(self, audio):
        """The tree maps each key to its dependents."""
        structure, definitions = audio

        assert RelevanceEngine.get_relevance_tree(structure, definitions) == {
            "audio.enabled": ["audio.volume"],
            "audio.volume": [],
        }


class TestValidateRelevanceTree:
    """Test cycle validation."""

    def test_valid_tree(self, audio):
        """An acyclic configuration is valid."""
        structure, definitions = audio
        result = RelevanceEngine.validate_relevance_tree(structure, definitions)

        assert result.valid
        assert result.errors == []
        assert result.cycles == []

    def test_two_key_cycle(self):
        """A depends on B and B on A: both are reported once."""
        definitions = [
            _definition("a", relevance=DependsOn(key="b")),
            _definition("b", relevance=DependsOn(key="a")),
        ]
        structure = _structure(*_items("a", "b"))

        result = RelevanceEngine.validate_relevance_tree(structure, definitions)

        assert not result.valid
        assert sorted(result.errors) == [
            "Circular dependency detected involving setting: a",
            "Circular dependency detected involving setting: b",
        ]

    def test_every_participant_reported(self):
        """A key joining the cycle through an already visited key is reported."""
        definitions = [
            _definition("A", relevance=DependsOn(key="C")),
            _definition("B", relevance=DependsOn(key="A") & DependsOn(key="D")),
            _definition("C", relevance=DependsOn(key="B")),
            _definition("D", relevance=DependsOn(key="A")),
        ]
        structure = _structure(*_items("A", "B", "C", "D"))

        assert RelevanceEngine.get_relevance_tree(structure, definitions) == {
            "A": ["B", "D"],
            "B": ["C"],
            "C": ["A"],
            "D": ["B"],
        }

        result = RelevanceEngine.validate_relevance_tree(structure, definitions)

        assert not result.valid
        assert result.errors == [
            f"Circular dependency detected involving setting: {key}" for key in "ABCD"
        ]

    def test_cycle_logged(self, caplog):
        """Cycle errors are logged as warnings."""
        definitions = [_definition("a", relevance=DependsOn(key="a"))]
        structure = _structure(*_items("a"))

        with caplog.at_level("WARNING", logger="pitz.relevance.engine"):
            RelevanceEngine.validate_relevance_tree(structure, definitions)

        assert "involving setting: a" in caplog.text


class TestDependencyOrder:
    """Test dependency ordering."""

    def test_dependencies_precede_dependents(self):
        """Chain a -> b -> c is ordered a, b, c."""
        definitions = [
            _definition("c", relevance=DependsOn(key="b")),
            _definition("b", relevance=DependsOn(key="a")),
            _definition("a"),
        ]
        structure = _structure(*_items("c", "b", "a"))

        assert RelevanceEngine.get_dependency_order(structure, definitions) == ["a", "b", "c"]

    def test_cycle_does_not_raise(self):
        """Cyclic graphs still return every key once."""
        definitions = [
            _definition("a", relevance=DependsOn(key="b")),
            _definition("b", relevance=DependsOn(key="a")),
        ]
        structure = _structure(*_items("a", "b"))

        assert sorted(RelevanceEngine.get_dependency_order(structure, definitions)) == ["a", "b"]
