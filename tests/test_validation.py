"""Tests for definition validation, diagnostics and schema validators."""

from typing import Annotated, Literal

import pytest
from pydantic import Field, ValidationError

from pitz.assembly import check_configuration, check_value, schema, validate_definition
from pitz.errors import IncompleteDefinitionError, InvalidDefaultError
from pitz.types import (
    SettingDefinition,
    SettingsConfiguration,
    SettingsGroup,
    SettingsStructure,
    SettingsTab,
    SettingStructureItem,
)


class TestValidateDefinition:
    """Test build-time definition checks."""

    def test_valid_definition_passes(self):
        """A complete, consistent definition is returned unchanged."""
        definition = SettingDefinition(key="a", type="number", default_value=3)
        assert validate_definition(definition) is definition

    def test_empty_key(self):
        """An empty key is incomplete."""
        with pytest.raises(IncompleteDefinitionError) as exc_info:
            validate_definition(SettingDefinition(key="", type="number", default_value=3))
        assert exc_info.value.missing == ["key"]

    def test_validator_returning_false(self):
        """A validator may reject by returning False."""
        definition = SettingDefinition(
            key="a", type="number", default_value=-1, validator=lambda v: v >= 0
        )
        with pytest.raises(InvalidDefaultError) as exc_info:
            validate_definition(definition)
        assert exc_info.value.key == "a"

    def test_validator_raising(self):
        """A validator may reject by raising ValueError."""
        def positive(value):
            if value <= 0:
                raise ValueError("must be positive")

        definition = SettingDefinition(key="a", type="number", default_value=0, validator=positive)
        with pytest.raises(InvalidDefaultError, match="must be positive"):
            validate_definition(definition)


class TestCheckValue:
    """Test candidate value checks."""

    def test_accepts_matching_value(self):
        """A matching value yields no reason."""
        assert check_value(5, "number", None) is None

    def test_rejects_none(self):
        """None is never a legal value."""
        assert check_value(None, "number", None) == "value must not be None"

    def test_rejects_wrong_type(self):
        """Type mismatches are reported."""
        assert "expected number" in check_value("5", "number", None)

    def test_rejects_containers(self):
        """Non-scalar values are reported."""
        assert "unsupported value type" in check_value([1], None, None)

    def test_other_exceptions_propagate(self):
        """Validator bugs (not ValueError/TypeError) are not hidden."""
        def broken(value):
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            check_value(1, "number", broken)


class TestSchema:
    """Test pydantic-backed schema validators."""

    def test_range(self):
        """Annotated constraints are enforced."""
        level = schema(Annotated[int, Field(ge=0, le=10)])

        assert level(7) == 7
        with pytest.raises(ValidationError):
            level(15)

    def test_strict_by_default(self):
        """Strings are not coerced to numbers."""
        with pytest.raises(ValidationError):
            schema(int)("5")

    def test_literal(self):
        """Literal choices restrict string values."""
        quality = schema(Literal["low", "high"])

        assert check_value("low", "enum", quality) is None
        assert check_value("medium", "enum", quality) is not None


class TestCheckConfiguration:
    """Test referential-integrity diagnostics."""

    def _configuration(self, defined, referenced):
        return SettingsConfiguration(
            definitions=tuple(
                SettingDefinition(key=k, type="boolean", default_value=True) for k in defined
            ),
            structure=SettingsStructure(
                tabs=(
                    SettingsTab(
                        id="t",
                        label="T",
                        groups=(
                            SettingsGroup(
                                title="G",
                                settings=tuple(SettingStructureItem(key=k) for k in referenced),
                            ),
                        ),
                    ),
                )
            ),
        )

    def test_clean_configuration(self):
        """Matching definitions and references produce no warnings."""
        diagnostics = check_configuration(self._configuration(["a", "b"], ["b", "a"]))
        assert not diagnostics.has_warnings

    def test_missing_and_unused(self, caplog):
        """Missing and unused keys are reported and logged."""
        with caplog.at_level("WARNING", logger="pitz.assembly.validation"):
            diagnostics = check_configuration(self._configuration(["a", "b"], ["a", "c"]))

        assert diagnostics.missing == ["c"]
        assert diagnostics.unused == ["b"]
        assert "Missing setting definitions" in caplog.text
        assert "Unused setting definitions" in caplog.text
