"""Project the Endpoint Catalog into tool descriptors and resource views.

Tools, resources and resource templates are all views over the same
catalog; nothing here holds state of its own.
"""

from __future__ import annotations

from typing import Any

import jinja2

from .errors import CatalogError
from .models import Catalog, Endpoint, Parameter, ResourceView, ToolDescriptor
from .naming import build_tool_name
from .url_builder import RESOURCE_URI_ARG

_ENV = jinja2.Environment(
    autoescape=False,
    keep_trailing_newline=False,
    trim_blocks=True,
    lstrip_blocks=True,
)

_DESCRIPTION_TEMPLATE = _ENV.from_string(
    "{{ method }} {{ path }}"
    "{% if description %} - {{ description }}{% endif %}"
    "{% if tags %} (Tags: {{ tags | join(', ') }}){% endif %}"
    "{% if operation_id %} [{{ operation_id }}]{% endif %}"
)

_RESOURCE_URI_DESCRIPTION = (
    "Optional fully instantiated resource URI (e.g. quay://api/v1/repository/org/repo)."
    " Overrides the path parameters."
)


def describe(endpoint: Endpoint) -> str:
    """Render the human description advertised for an endpoint."""
    return _DESCRIPTION_TEMPLATE.render(
        method=endpoint.method,
        path=endpoint.path,
        description=endpoint.description or endpoint.summary,
        tags=endpoint.tags,
        operation_id=endpoint.operation_id,
    )


def display_name(endpoint: Endpoint) -> str:
    return endpoint.summary or endpoint.description or f"{endpoint.method} {endpoint.path}"


def _property(param: Parameter) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": param.type}
    description = param.description
    if param.enum:
        values = ", ".join(param.enum)
        description = f"{description} (values: {values})" if description else f"Values: {values}"
        if param.type == "string":
            prop["enum"] = list(param.enum)
    if description:
        prop["description"] = description
    return prop


def input_schema(endpoint: Endpoint) -> dict[str, Any]:
    """Build the JSON schema for an endpoint's arguments.

    Path placeholders are required strings; declared query parameters are
    always optional.
    """
    declared = {p.name: p for p in endpoint.parameters if p.location == "path"}
    properties: dict[str, Any] = {}

    for name in endpoint.placeholders:
        prop: dict[str, Any] = {"type": "string"}
        description = declared[name].description if name in declared else ""
        prop["description"] = description or f"Path parameter: {name}"
        properties[name] = prop

    for param in endpoint.query_parameters:
        if param.name in properties:
            continue
        properties[param.name] = _property(param)

    properties[RESOURCE_URI_ARG] = {
        "type": "string",
        "description": _RESOURCE_URI_DESCRIPTION,
    }

    return {
        "type": "object",
        "properties": properties,
        "required": list(endpoint.placeholders),
    }


def project(catalog: Catalog) -> list[ToolDescriptor]:
    """Turn every cataloged endpoint into a tool descriptor, sorted by name."""
    tools: dict[str, ToolDescriptor] = {}
    for endpoint in catalog.values():
        declared = set(endpoint.placeholders) | {p.name for p in endpoint.query_parameters}
        if RESOURCE_URI_ARG in declared:
            raise CatalogError(
                f"Endpoint {endpoint.path!r} declares a parameter named {RESOURCE_URI_ARG!r}, "
                "which is reserved"
            )
        name = build_tool_name(endpoint.path, endpoint.operation_id)
        existing = tools.get(name)
        if existing is not None:
            raise CatalogError(
                f"Tool name {name!r} derived from both "
                f"{catalog[existing.endpoint_key].path!r} and {endpoint.path!r}"
            )
        tools[name] = ToolDescriptor(
            name=name,
            description=describe(endpoint),
            input_schema=input_schema(endpoint),
            endpoint_key=endpoint.key,
        )
    return [tools[name] for name in sorted(tools)]


def _view(endpoint: Endpoint) -> ResourceView:
    return ResourceView(
        uri=endpoint.key,
        name=display_name(endpoint),
        description=describe(endpoint),
    )


def resources(catalog: Catalog) -> list[ResourceView]:
    """Placeholder-free endpoints, readable directly by key."""
    return [_view(e) for e in catalog.values() if not e.is_parameterized]


def resource_templates(catalog: Catalog) -> list[ResourceView]:
    """Parameterized endpoints, instantiated by filling the key's placeholders."""
    return [_view(e) for e in catalog.values() if e.is_parameterized]
