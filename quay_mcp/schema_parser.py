"""Parse a raw discovery document into the Spec Model.

Handles:
- GET-only operation selection (other methods are counted, not kept)
- Path-item level parameters merged with operation parameters
- $ref parameter resolution
- Swagger 2 inline types and OpenAPI 3 parameter schemas
- Enum value extraction
- HTML stripping in descriptions
"""

from __future__ import annotations

import re
from typing import Any

from .loader import get_paths, resolve_ref
from .models import Operation, Parameter, SpecDocument

_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Only these locations can be expressed through a GET URL
_URL_LOCATIONS = ("path", "query")

_JSON_TYPES = {"string", "integer", "number", "boolean"}


def _strip_html(text: str) -> str:
    """Strip HTML tags and collapse whitespace."""
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text


def resolve_schema_type(spec: dict[str, Any], schema: dict[str, Any]) -> str:
    """Resolve a parameter declaration to a JSON-schema scalar type."""
    if not schema:
        return "string"

    if "$ref" in schema:
        return resolve_schema_type(spec, resolve_ref(spec, schema["$ref"]))

    # OpenAPI 3 keeps the type under "schema"
    if "type" not in schema and isinstance(schema.get("schema"), dict):
        return resolve_schema_type(spec, schema["schema"])

    for key in ("oneOf", "anyOf", "allOf"):
        for sub in schema.get(key, []):
            t = resolve_schema_type(spec, sub)
            if t != "string":
                return t

    schema_type = schema.get("type")
    if schema_type in _JSON_TYPES:
        return schema_type
    return "string"


def _get_enum_values(spec: dict[str, Any], schema: dict[str, Any]) -> tuple[str, ...] | None:
    """Extract enum values, resolving $ref if needed."""
    if "$ref" in schema:
        return _get_enum_values(spec, resolve_ref(spec, schema["$ref"]))
    if "enum" in schema:
        return tuple(str(v) for v in schema["enum"])
    if isinstance(schema.get("schema"), dict):
        return _get_enum_values(spec, schema["schema"])
    return None


def _resolve_parameter(spec: dict[str, Any], param: dict[str, Any]) -> dict[str, Any]:
    if "$ref" in param:
        return resolve_ref(spec, param["$ref"])
    return param


def _merge_parameters(
    spec: dict[str, Any],
    path_level: list[dict[str, Any]],
    operation_level: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-item and operation parameters; operation wins on (name, in)."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in list(path_level) + list(operation_level):
        param = _resolve_parameter(spec, raw)
        if "name" not in param:
            continue
        merged[(param["name"], param.get("in", "query"))] = param
    return list(merged.values())


def parse_parameters(
    spec: dict[str, Any],
    operation: dict[str, Any],
    path_parameters: list[dict[str, Any]] | None = None,
) -> tuple[Parameter, ...]:
    """Parse the path and query parameters of one operation."""
    params: list[Parameter] = []

    for param in _merge_parameters(spec, path_parameters or [], operation.get("parameters") or []):
        location = param.get("in", "query")
        if location not in _URL_LOCATIONS:
            continue

        description = param.get("description") or ""
        if description:
            description = _strip_html(description)

        params.append(Parameter(
            name=param["name"],
            location=location,
            required=bool(param.get("required", location == "path")),
            description=description,
            type=resolve_schema_type(spec, param),
            enum=_get_enum_values(spec, param),
        ))

    return tuple(params)


def parse_spec(spec: dict[str, Any] | None) -> SpecDocument:
    """Build the Spec Model from a raw discovery document."""
    if not spec:
        return SpecDocument()

    operations: dict[str, Operation] = {}
    skipped = 0

    for path, path_item in sorted(get_paths(spec).items()):
        if not isinstance(path_item, dict):
            continue
        skipped += sum(1 for m in _METHODS if m != "get" and m in path_item)

        operation = path_item.get("get")
        if not isinstance(operation, dict):
            continue

        description = operation.get("description") or ""
        operations[path] = Operation(
            path=path,
            method="GET",
            summary=_strip_html(operation.get("summary") or ""),
            description=_strip_html(description) if description else "",
            operation_id=operation.get("operationId") or None,
            tags=tuple(operation.get("tags") or ()),
            parameters=parse_parameters(spec, operation, path_item.get("parameters")),
        )

    info = spec.get("info") or {}
    return SpecDocument(
        operations=operations,
        host=spec.get("host") or "",
        base_path=spec.get("basePath") or "",
        schemes=tuple(spec.get("schemes") or ()),
        title=info.get("title") or "",
        version=info.get("version") or "",
        skipped_methods=skipped,
    )
