"""
Result Types

Diagnostic results returned by relevance validation and configuration checks.
Both are non-fatal: callers inspect them and decide what to do.
"""

from pydantic import BaseModel, Field


class RelevanceValidationResult(BaseModel):
    """
    Outcome of a relevance-graph cycle check.

    Attributes:
        valid: True when the dependency graph has no cycles
        errors: One message per distinct cycle participant
        cycles: The cycles found, each as a list of keys
    """

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    cycles: list[list[str]] = Field(default_factory=list)


class ConfigurationDiagnostics(BaseModel):
    """
    Referential-integrity diagnostics for an assembled configuration.

    Attributes:
        missing: Keys referenced by the structure with no definition
        unused: Defined keys never referenced by the structure
    """

    missing: list[str] = Field(default_factory=list)
    unused: list[str] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.missing or self.unused)
