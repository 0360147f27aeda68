"""Reduce two independently recorded documents into one.

Folds over separate streams of observations can run side by side and be
combined afterwards. ``first`` takes precedence the same way the earlier
observation does in a single fold.
"""

from swagger_recorder.errors import UnsupportedVersionError
from swagger_recorder.schema.merge import merge
from swagger_recorder.swagger.accumulator import add_unique
from swagger_recorder.swagger.models import (
    SWAGGER_VERSION,
    BodyParameter,
    Operation,
    Parameter,
    PathItem,
    Response,
    SwaggerDocument,
)


def merge_documents(first: SwaggerDocument, second: SwaggerDocument) -> SwaggerDocument:
    for document in (first, second):
        if document.swagger != SWAGGER_VERSION:
            raise UnsupportedVersionError(
                f"Swagger {SWAGGER_VERSION} currently only supported, got {document.swagger!r}"
            )

    paths = dict(first.paths)
    for template, item in second.paths.items():
        paths[template] = _merge_path_items(paths[template], item) if template in paths else item
    return first.model_copy(update={"paths": paths})


def _merge_path_items(first: PathItem, second: PathItem) -> PathItem:
    operations = first.operations()
    for method, operation in second.operations().items():
        if method in operations:
            operations[method] = _merge_operations(operations[method], operation)
        else:
            operations[method] = operation

    update = dict(operations)
    if first.parameters is None:
        update["parameters"] = second.parameters
    return first.model_copy(update=update)


def _merge_operations(first: Operation, second: Operation) -> Operation:
    consumes, produces = first.consumes, first.produces
    for content_type in second.consumes:
        consumes = add_unique(consumes, content_type)
    for content_type in second.produces:
        produces = add_unique(produces, content_type)

    responses = dict(first.responses)
    for status, response in second.responses.items():
        responses[status] = _merge_responses(responses[status], response) if status in responses else response

    return first.model_copy(
        update={
            "consumes": consumes,
            "produces": produces,
            "parameters": _merge_parameters(first.parameters, second.parameters),
            "responses": responses,
        }
    )


def _merge_parameters(first: list[Parameter], second: list[Parameter]) -> list[Parameter]:
    merged = list(first)
    positions = {_parameter_key(parameter): index for index, parameter in enumerate(first)}
    for parameter in second:
        key = _parameter_key(parameter)
        if key not in positions:
            positions[key] = len(merged)
            merged.append(parameter)
            continue
        existing = merged[positions[key]]
        if isinstance(existing, BodyParameter) and isinstance(parameter, BodyParameter):
            merged[positions[key]] = existing.model_copy(
                update={"schema_": merge(existing.schema_, parameter.schema_)}
            )
    return merged


def _merge_responses(first: Response, second: Response) -> Response:
    if first.schema_ is None:
        schema = second.schema_
    elif second.schema_ is None:
        schema = first.schema_
    else:
        schema = merge(first.schema_, second.schema_)
    return first.model_copy(update={"schema_": schema})


def _parameter_key(parameter: Parameter) -> tuple[str, str]:
    # at most one body parameter per operation, whatever its name
    if isinstance(parameter, BodyParameter):
        return ("body", "")
    return (parameter.in_, parameter.name)
