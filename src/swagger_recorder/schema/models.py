"""Schema node models for inferred request and response bodies.

Every node is immutable. The concrete class is chosen from the ``type`` key
when a node is validated, so inference and merging dispatch on the class
instead of re-inspecting raw dicts. Keys other than the shape fields
(``description``, ``example``, ...) are kept as pydantic extras.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

SCALAR_TYPES = ("string", "number", "integer", "boolean")


class BaseSchema(BaseModel):
    """Fields shared by every typed schema node."""

    model_config = ConfigDict(extra="allow", frozen=True)

    @property
    def metadata(self) -> dict[str, Any]:
        """Pass-through keys that do not describe the node's shape."""
        return dict(self.model_extra or {})


class UntypedSchema(BaseModel):
    """Items of an array that has only been observed empty. Dumps as ``{}``."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class ScalarSchema(BaseSchema):
    type: Literal["string", "number", "integer", "boolean"]


class ArraySchema(BaseSchema):
    type: Literal["array"] = "array"
    items: "ItemsSchema" = Field(default_factory=UntypedSchema)


class ObjectSchema(BaseSchema):
    type: Literal["object"] = "object"
    properties: dict[str, "SchemaNode"] = Field(default_factory=dict)
    required: list[str] | None = None  # never an empty list

    @field_validator("required")
    @classmethod
    def _empty_required_is_absent(cls, value: list[str] | None) -> list[str] | None:
        return value or None


def _schema_tag(value: Any) -> str:
    if isinstance(value, dict):
        schema_type = value.get("type")
    else:
        schema_type = getattr(value, "type", None)

    if schema_type is None:
        return "untyped"
    if schema_type in ("object", "array"):
        return schema_type
    return "scalar"


SchemaNode = Annotated[
    Union[
        Annotated[ObjectSchema, Tag("object")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[ScalarSchema, Tag("scalar")],
    ],
    Discriminator(_schema_tag),
]

ItemsSchema = Annotated[
    Union[
        Annotated[ObjectSchema, Tag("object")],
        Annotated[ArraySchema, Tag("array")],
        Annotated[ScalarSchema, Tag("scalar")],
        Annotated[UntypedSchema, Tag("untyped")],
    ],
    Discriminator(_schema_tag),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()
