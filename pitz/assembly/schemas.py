"""
Schema Validators

Build setting validators from pydantic-compatible type annotations.

Example:
    >>> from typing import Annotated, Literal
    >>> from pydantic import Field
    >>> level = schema(Annotated[int, Field(ge=0, le=10)])
    >>> quality = schema(Literal["low", "medium", "high"])
    >>> level(7)
    7
    >>> level(15)  # raises pydantic.ValidationError
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from pitz.types.values import Validator


def schema(annotation: Any, *, strict: bool = True) -> Validator:
    """
    Create a validator from a type annotation.

    Args:
        annotation: Any type pydantic can validate (Annotated constraints,
            Literal choices, constrained types)
        strict: Reject values that would need coercion (e.g., "5" for int)

    Returns:
        Callable that returns the validated value or raises ValidationError
    """
    adapter = TypeAdapter(annotation)

    def validate(value: Any) -> Any:
        return adapter.validate_python(value, strict=strict)

    validate.annotation = annotation  # type: ignore[attr-defined]
    validate.__name__ = f"schema[{getattr(annotation, '__name__', repr(annotation))}]"
    return validate
