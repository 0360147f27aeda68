"""Infer a minimal JSON Schema from one decoded JSON value."""

import math
from typing import Any

from swagger_recorder.errors import UnsupportedValueTypeError
from swagger_recorder.schema.models import (
    ArraySchema,
    ObjectSchema,
    ScalarSchema,
    SchemaNode,
    UntypedSchema,
)

# Largest integer a JSON consumer using IEEE doubles represents exactly.
MAX_SAFE_INTEGER = 2**53 - 1


def infer(value: Any) -> SchemaNode:
    """Build the schema describing ``value``'s shape.

    Every non-null key of an object is marked required; optionality only
    shows up once observations are merged. Null-valued keys are skipped
    because their type cannot be known. Arrays are described by their first
    element only.
    """
    if isinstance(value, dict):
        present = [key for key, item in value.items() if item is not None]
        return ObjectSchema(
            properties={key: infer(value[key]) for key in present},
            required=present or None,
        )
    if isinstance(value, (list, tuple)):
        if not value:
            return ArraySchema(items=UntypedSchema())
        return ArraySchema(items=infer(value[0]))
    # bool is a subclass of int
    if isinstance(value, bool):
        return ScalarSchema(type="boolean")
    if isinstance(value, (int, float)):
        return ScalarSchema(type="integer" if _is_safe_integer(value) else "number")
    if isinstance(value, str):
        return ScalarSchema(type="string")

    raise UnsupportedValueTypeError(
        f"Data type {type(value).__name__} not supported, value: {value!r}"
    )


def _is_safe_integer(value: int | float) -> bool:
    if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
        return False
    return abs(value) <= MAX_SAFE_INTEGER
