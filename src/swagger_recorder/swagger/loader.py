"""Read and write Swagger documents as JSON or YAML."""

import json
from pathlib import Path
from typing import Any

import yaml

from swagger_recorder.errors import UnsupportedVersionError
from swagger_recorder.swagger.models import SWAGGER_VERSION, SwaggerDocument


def load_document(file_path: Path) -> SwaggerDocument:
    """Load a Swagger 2.0 document from a ``.json``, ``.yaml`` or ``.yml`` file."""
    text = file_path.read_text(encoding="utf-8")
    # YAML is a superset of JSON, so one loader covers both
    return parse_document(yaml.safe_load(text))


def parse_document(data: Any) -> SwaggerDocument:
    """Validate already-parsed document data.

    Raises UnsupportedVersionError for anything that is not a Swagger 2.0
    mapping, OpenAPI 3 documents included.
    """
    if not isinstance(data, dict):
        raise UnsupportedVersionError(f"Expected a Swagger document mapping, got {type(data).__name__}")
    version = data.get("swagger")
    if isinstance(version, float):
        raise UnsupportedVersionError(
            f"Swagger version must be the string {SWAGGER_VERSION!r}, got the number {version!r}; "
            "quote it in YAML"
        )
    if version != SWAGGER_VERSION:
        found = version if version is not None else data.get("openapi")
        raise UnsupportedVersionError(f"Swagger {SWAGGER_VERSION} currently only supported, got {found!r}")
    return SwaggerDocument.model_validate(data)


def document_to_dict(document: SwaggerDocument) -> dict:
    """Plain JSON-compatible mapping of ``document``."""
    return document.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_document(document: SwaggerDocument, file_path: Path) -> None:
    """Write ``document`` as JSON for ``.json`` paths and YAML otherwise."""
    data = document_to_dict(document)
    if file_path.suffix.lower() == ".json":
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(text, encoding="utf-8")
