"""Merge two schema nodes inferred from different observations.

``first`` is the schema accumulated so far and ``second`` the one inferred
from the newest observation. Merging never widens a type: the result keeps
``first.type`` and is valid for both observations.
"""

import json
from typing import Any

from swagger_recorder.errors import MissingRequiredKeyError, TypeMismatchError
from swagger_recorder.schema.models import (
    ArraySchema,
    ObjectSchema,
    ScalarSchema,
    SchemaNode,
    UntypedSchema,
)


def merge(first: SchemaNode, second: SchemaNode) -> SchemaNode:
    """Return one schema consistent with both ``first`` and ``second``.

    Metadata keys present on both sides keep ``first``'s value.

    Raises:
        TypeMismatchError: the two ``type`` tags differ.
        MissingRequiredKeyError: a key required by both sides is missing
            from one side's ``properties``.
    """
    if first.type != second.type:
        raise TypeMismatchError(
            f"The types {first.type!r} and {second.type!r} are not compatible "
            f"for {_dump(first)} and {_dump(second)}"
        )

    metadata = {**second.metadata, **first.metadata}

    if isinstance(first, ObjectSchema):
        return _merge_objects(first, second, metadata)
    if isinstance(first, ArraySchema):
        return ArraySchema(items=_merge_items(first.items, second.items), **metadata)
    return ScalarSchema(type=first.type, **metadata)


def _merge_objects(first: ObjectSchema, second: ObjectSchema, metadata: dict[str, Any]) -> ObjectSchema:
    second_required = set(second.required or [])
    required = [key for key in first.required or [] if key in second_required]

    merged_required = {}
    for key in required:
        if key not in first.properties:
            raise MissingRequiredKeyError(
                f"Missing required key {key!r} within first properties {_dump_properties(first)}"
            )
        if key not in second.properties:
            raise MissingRequiredKeyError(
                f"Missing required key {key!r} within second properties {_dump_properties(second)}"
            )
        merged_required[key] = merge(first.properties[key], second.properties[key])

    properties = dict(first.properties)
    for key, value in second.properties.items():
        properties.setdefault(key, value)
    properties.update(merged_required)
    return ObjectSchema(properties=properties, required=required or None, **metadata)


def _merge_items(first, second):
    if isinstance(first, UntypedSchema):
        return second
    if isinstance(second, UntypedSchema):
        return first
    return merge(first, second)


def _dump(schema: SchemaNode) -> str:
    return json.dumps(schema.model_dump(exclude_none=True), sort_keys=True, default=str)


def _dump_properties(schema: ObjectSchema) -> str:
    return json.dumps(
        {key: value.model_dump(exclude_none=True) for key, value in schema.properties.items()},
        sort_keys=True,
        default=str,
    )
