"""Map request URLs onto path templates."""

import re
from collections.abc import Iterable
from typing import NamedTuple
from urllib.parse import unquote, urlsplit

from swagger_recorder.swagger.models import NonBodyParameter

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)
TEMPLATE_PARAMETER = re.compile(r"\{\w+\}")


class ResolvedPath(NamedTuple):
    template: str
    parameters: list[NonBodyParameter]


def request_path(url: str) -> str:
    """Percent-decoded path component of ``url``."""
    return unquote(urlsplit(url).path) or "/"


def template_pattern(template: str) -> re.Pattern:
    """Compile ``template`` so each ``{name}`` matches one or more characters."""
    parts = TEMPLATE_PARAMETER.split(template)
    # a decoded %0A is still part of a segment
    return re.compile(".+".join(re.escape(part) for part in parts), re.DOTALL)


def resolve(url: str, known_templates: Iterable[str]) -> ResolvedPath:
    """Find the template for ``url`` or synthesize one.

    Known templates are tried in order and the first whose pattern matches
    the whole path is reused as-is. Otherwise UUIDs anywhere in the path are
    replaced by ``{uuid}``, ``{uuid1}``, ``{uuid2}``... with one path
    parameter per replacement.
    """
    path = request_path(url)

    for template in known_templates:
        if template_pattern(template).fullmatch(path):
            return ResolvedPath(template, [])

    parameters = []

    def _parameterize(match: re.Match) -> str:
        name = "uuid" if not parameters else f"uuid{len(parameters)}"
        parameters.append(NonBodyParameter.path(name))
        return "{" + name + "}"

    return ResolvedPath(UUID_PATTERN.sub(_parameterize, path), parameters)
