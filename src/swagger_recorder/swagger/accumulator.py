"""Fold observed HTTP traffic into a Swagger 2.0 document.

Each call takes the document recorded so far plus one request/response pair
and returns a new document. Nothing is mutated, so a failing observation
leaves the caller holding the last good document.
"""

import json
import logging
from collections.abc import Iterable
from http import HTTPStatus
from typing import Any

from swagger_recorder.errors import (
    AccumulationError,
    BodyDecodeError,
    UnsupportedMethodError,
    UnsupportedVersionError,
)
from swagger_recorder.schema.infer import infer
from swagger_recorder.schema.merge import merge
from swagger_recorder.schema.models import SchemaNode
from swagger_recorder.swagger.models import (
    HTTP_METHODS,
    SWAGGER_VERSION,
    BodyParameter,
    Info,
    NonBodyParameter,
    Observation,
    ObservedRequest,
    ObservedResponse,
    Operation,
    Parameter,
    PathItem,
    Response,
    SwaggerDocument,
)
from swagger_recorder.swagger.paths import resolve

logger = logging.getLogger(__name__)

UNKNOWN_STATUS_DESCRIPTION = "Unknown status code"


def accumulate(
    document: SwaggerDocument,
    request: ObservedRequest,
    response: ObservedResponse,
) -> SwaggerDocument:
    """Return ``document`` updated with what one request/response pair shows.

    Raises:
        UnsupportedVersionError: ``document`` is not Swagger 2.0.
        UnsupportedMethodError: the request method has no Swagger 2.0 slot.
        BodyDecodeError: a body declared as JSON does not parse.
        SchemaError: a body cannot be inferred or merged with what was
            recorded before.
    """
    if document.swagger != SWAGGER_VERSION:
        raise UnsupportedVersionError(
            f"Swagger {SWAGGER_VERSION} currently only supported, got {document.swagger!r}"
        )

    method = request.method.lower()
    if method not in HTTP_METHODS:
        raise UnsupportedMethodError(f"Method {request.method!r} has no Swagger 2.0 operation")

    template, path_parameters = resolve(request.url, document.paths)
    path_item = document.paths.get(template) or PathItem()
    operation = getattr(path_item, method)
    if operation is None:
        operation = Operation(parameters=_sibling_path_parameters(path_item))

    parameters = _add_path_parameters(operation.parameters, path_parameters)
    if request.body is not None:
        body = decode_body(request.body, request.content_type)
        parameters = _record_request_body(parameters, infer(body))

    status = str(response.status_code)
    responses = {
        **operation.responses,
        status: _record_response(operation.responses.get(status), response),
    }

    operation = operation.model_copy(
        update={
            "consumes": add_unique(operation.consumes, request.content_type),
            "produces": add_unique(operation.produces, response.content_type),
            "parameters": parameters,
            "responses": responses,
        }
    )
    path_item = path_item.model_copy(update={method: operation})

    logger.debug("Recorded %s %s -> %s", method.upper(), template, status)
    return document.model_copy(update={"paths": {**document.paths, template: path_item}})


def fold(
    document: SwaggerDocument,
    observations: Iterable[Observation],
    skip_errors: bool = False,
) -> SwaggerDocument:
    """Apply ``accumulate`` to each observation in order.

    With ``skip_errors`` an observation that cannot be recorded is logged and
    skipped, and folding continues from the last good document.
    """
    for index, observation in enumerate(observations):
        request, response = observation.request, observation.response
        try:
            document = accumulate(document, request, response)
        except AccumulationError as exc:
            if not skip_errors:
                raise
            logger.warning(
                "Skipping observation %d (%s %s): %s", index, request.method, request.url, exc
            )
    return document


class SwaggerAccumulator:
    """Records observations into documents sharing the same ``info``."""

    def __init__(self, info: Info | None = None, skip_errors: bool = False):
        self.info = info or Info()
        self.skip_errors = skip_errors

    def empty_document(self) -> SwaggerDocument:
        return SwaggerDocument(info=self.info)

    def accumulate(
        self,
        document: SwaggerDocument,
        request: ObservedRequest,
        response: ObservedResponse,
    ) -> SwaggerDocument:
        return accumulate(document, request, response)

    def fold(
        self,
        observations: Iterable[Observation],
        document: SwaggerDocument | None = None,
    ) -> SwaggerDocument:
        """Fold ``observations`` into ``document``, or into a fresh one."""
        if document is None:
            document = self.empty_document()
        return fold(document, observations, skip_errors=self.skip_errors)


def is_json_media_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode_body(body: Any, content_type: str | None) -> Any:
    """Parse textual JSON bodies; anything else is passed through."""
    if not isinstance(body, (str, bytes, bytearray)) or not is_json_media_type(content_type):
        return body
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise BodyDecodeError(f"Unable to parse JSON body: {body!r}") from exc


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def add_unique(values: list[str], value: str | None) -> list[str]:
    """Append ``value`` unless it is empty or already present."""
    if not value or value in values:
        return list(values)
    return [*values, value]


def status_description(status_code: int) -> str:
    # HTTPStatus phrases follow the running interpreter; some (413, 422) differ across Python releases
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return UNKNOWN_STATUS_DESCRIPTION


def _sibling_path_parameters(path_item: PathItem) -> list[Parameter]:
    """Path parameters other methods of the same path already declare.

    A known template is reused without inferring parameters, so a method seen
    for the first time on it takes them from its siblings.
    """
    declared = {parameter.name for parameter in path_item.parameters or []}
    inherited = {}
    for operation in path_item.operations().values():
        for parameter in operation.parameters:
            if isinstance(parameter, NonBodyParameter) and parameter.in_ == "path" and parameter.name not in declared:
                inherited.setdefault(parameter.name, parameter)
    return list(inherited.values())


def _add_path_parameters(
    parameters: list[Parameter], path_parameters: list[NonBodyParameter]
) -> list[Parameter]:
    names = {parameter.name for parameter in parameters if not isinstance(parameter, BodyParameter)}
    added = [parameter for parameter in path_parameters if parameter.name not in names]
    return [*parameters, *added]


def _record_request_body(parameters: list[Parameter], schema: SchemaNode) -> list[Parameter]:
    for index, parameter in enumerate(parameters):
        if isinstance(parameter, BodyParameter):
            merged = parameter.model_copy(update={"schema_": merge(parameter.schema_, schema)})
            return [*parameters[:index], merged, *parameters[index + 1:]]
    return [*parameters, BodyParameter(schema_=schema)]


def _record_response(existing: Response | None, response: ObservedResponse) -> Response:
    body = decode_body(response.body, response.content_type)
    if body is None:
        schema = None
    else:
        schema = infer(body)
        if existing is not None and existing.schema_ is not None:
            schema = merge(existing.schema_, schema)

    description = status_description(response.status_code)
    if existing is None:
        return Response(description=description, schema_=schema)
    return existing.model_copy(update={"description": description, "schema_": schema})
