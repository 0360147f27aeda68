"""Swagger 2.0 document models and the HTTP observations folded into them.

Only the parts of Swagger 2.0 that recording touches are modeled
explicitly. Any other key found in a loaded document is kept as an extra so
the document round-trips unchanged.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_serializer,
)

from swagger_recorder.schema.models import SchemaNode

SWAGGER_VERSION = "2.0"
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch")


class Info(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    title: str = "Generated Schema"
    version: str = "1.0"


class NonBodyParameter(BaseModel):
    """A path, query, header or formData parameter."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    in_: Literal["path", "query", "header", "formData"] = Field(alias="in")
    name: str
    type: str = "string"
    required: bool = False
    description: str | None = None

    @classmethod
    def path(cls, name: str) -> "NonBodyParameter":
        """Path parameter as produced for a templated path segment."""
        return cls(in_="path", name=name, type="string", required=True, description=name)


class BodyParameter(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    in_: Literal["body"] = Field(default="body", alias="in")
    name: str = "body"
    schema_: SchemaNode = Field(alias="schema")


def _parameter_tag(value: Any) -> str:
    location = value.get("in") if isinstance(value, dict) else getattr(value, "in_", None)
    return "body" if location == "body" else "other"


Parameter = Annotated[
    Union[
        Annotated[BodyParameter, Tag("body")],
        Annotated[NonBodyParameter, Tag("other")],
    ],
    Discriminator(_parameter_tag),
]


class Response(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    description: str
    # None when the last observed body was empty; dropped on output.
    schema_: SchemaNode | None = Field(default=None, alias="schema")


class Operation(BaseModel):
    """Everything recorded for one method under one path template."""

    model_config = ConfigDict(extra="allow", frozen=True)

    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    responses: dict[str, Response] = Field(default_factory=dict)

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_strings(cls, value: Any) -> Any:
        # YAML loads unquoted status codes as ints
        if isinstance(value, dict):
            return {str(code): response for code, response in value.items()}
        return value

    @model_serializer(mode="wrap")
    def _omit_empty_parameters(self, handler):
        data = handler(self)
        if not data.get("parameters"):
            data.pop("parameters", None)
        return data

    def body_parameter(self) -> BodyParameter | None:
        for parameter in self.parameters:
            if isinstance(parameter, BodyParameter):
                return parameter
        return None


class PathItem(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    get: Operation | None = None
    put: Operation | None = None
    post: Operation | None = None
    delete: Operation | None = None
    options: Operation | None = None
    head: Operation | None = None
    patch: Operation | None = None
    parameters: list[Parameter] | None = None

    def operations(self) -> dict[str, Operation]:
        """Defined operations keyed by lowercase method."""
        return {
            method: getattr(self, method)
            for method in HTTP_METHODS
            if getattr(self, method) is not None
        }


class SwaggerDocument(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    swagger: str = SWAGGER_VERSION
    info: Info = Field(default_factory=Info)
    paths: dict[str, PathItem] = Field(default_factory=dict)

    @field_validator("paths", mode="before")
    @classmethod
    def _missing_paths_are_empty(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {path: item if item is not None else {} for path, item in value.items()}
        return value


def header_value(headers: dict[str, str], name: str) -> str | None:
    """Look a header up by case-insensitive name."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


class ObservedRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @property
    def content_type(self) -> str | None:
        return header_value(self.headers, "Content-Type")


class ObservedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @property
    def content_type(self) -> str | None:
        return header_value(self.headers, "Content-Type")


class Observation(BaseModel):
    """One request/response pair seen on the wire."""

    model_config = ConfigDict(frozen=True)

    request: ObservedRequest
    response: ObservedResponse
