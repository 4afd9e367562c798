"""Turn an endpoint plus caller arguments into a literal request URL.

Two call shapes share one placeholder parser:
  - resource-identifier form: quay://api/v1/repository/myorg/myrepo is
    matched against /api/v1/repository/{namespace}/{repository}
  - named-argument form: {"namespace": "myorg", "repository": "myrepo",
    "public": "true"} is split into path and query parameters

Examples (registry https://quay.io, no base path):
  /api/v1/repository/{namespace}/{repository} + key above
    -> https://quay.io/api/v1/repository/myorg/myrepo
  /api/v1/repository + {"namespace": "redhat", "public": "true"}
    -> https://quay.io/api/v1/repository?namespace=redhat&public=true
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Mapping
from urllib.parse import quote

import httpx

from .errors import InvalidArgumentError, UnresolvedParameterError

if TYPE_CHECKING:
    from .models import Endpoint

RESOURCE_SCHEME = "quay://"

# Reserved argument carrying a fully instantiated resource key
RESOURCE_URI_ARG = "resource_uri"

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")
_SEGMENT = "([^/]+)"

# Path segments a substituted value may not contain
_UNSAFE_SEGMENTS = frozenset({"", ".", ".."})


def placeholder_names(template: str) -> list[str]:
    """Return the distinct {name} placeholders of a template, in order."""
    return list(dict.fromkeys(_PLACEHOLDER.findall(template)))


def template_pattern(template: str) -> re.Pattern[str]:
    """Compile a template into an anchored regex, one capture per placeholder."""
    pattern = ""
    last = 0
    for match in _PLACEHOLDER.finditer(template):
        pattern += re.escape(template[last:match.start()]) + _SEGMENT
        last = match.end()
    pattern += re.escape(template[last:])
    return re.compile(f"^{pattern}$")


def extract_path_parameters(resource_uri: str, template: str) -> dict[str, str]:
    """Recover placeholder values from a concrete resource key.

    Returns an empty dict when the template has no placeholders or the
    key does not have the template's shape.
    """
    names = _PLACEHOLDER.findall(template)
    if not names:
        return {}

    resource_path = resource_uri
    if resource_path.startswith(RESOURCE_SCHEME):
        resource_path = resource_path[len(RESOURCE_SCHEME):]
    if not resource_path.startswith("/"):
        resource_path = "/" + resource_path

    match = template_pattern(template).match(resource_path)
    if not match:
        return {}

    params: dict[str, str] = {}
    for name, value in zip(names, match.groups()):
        params.setdefault(name, value)
    return params


def _path_value(name: str, value: str) -> str:
    """Percent-encode a path value, keeping "/" so namespace/name stays one argument."""
    if any(segment in _UNSAFE_SEGMENTS for segment in value.split("/")):
        raise InvalidArgumentError(
            name, value, "must not contain empty, '.' or '..' path segments",
        )
    return quote(value, safe="/")


def substitute(template: str, values: Mapping[str, str]) -> str:
    """Fill every placeholder that has a value; leave the rest in place.

    Values are percent-encoded and may not step outside the template.
    """
    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        return _path_value(name, values[name]) if name in values else match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


def unresolved_placeholders(path: str) -> list[str]:
    return placeholder_names(path)


def compose_url(registry_url: str, base_path: str, path: str) -> str:
    """Join registry URL, document base path and endpoint path with single separators.

    The base path is skipped when the endpoint path already starts with it.
    """
    base = registry_url.rstrip("/")
    prefix = base_path.strip("/")
    prefix = f"/{prefix}" if prefix else ""
    path = "/" + path.lstrip("/")

    if prefix and (path == prefix or path.startswith(prefix + "/")):
        prefix = ""
    return f"{base}{prefix}{path}"


def _stringify(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise InvalidArgumentError(name, value)


def encode_query(values: Mapping[str, Any]) -> str:
    """Encode query parameters in sorted key order.

    None and empty values are omitted; lists of scalars repeat the key.
    Returns "" when nothing remains.
    """
    items: list[tuple[str, str]] = []
    for name in sorted(values):
        value = values[name]
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                if item is None or isinstance(item, (list, tuple, dict)):
                    raise InvalidArgumentError(name, item)
                text = _stringify(name, item)
                if text:
                    items.append((name, text))
            continue
        text = _stringify(name, value)
        if text:
            items.append((name, text))

    if not items:
        return ""
    return str(httpx.QueryParams(items))


def split_arguments(
    endpoint: Endpoint, args: Mapping[str, Any],
) -> tuple[dict[str, str], dict[str, Any]]:
    """Partition arguments into path values and query values."""
    placeholders = set(endpoint.placeholders)
    path_values: dict[str, str] = {}
    query_values: dict[str, Any] = {}

    for name, value in args.items():
        if name == RESOURCE_URI_ARG:
            continue
        if name in placeholders:
            if value is None:
                continue
            text = _stringify(name, value)
            if text:
                path_values[name] = text
        else:
            query_values[name] = value
    return path_values, query_values


def _finish(url: str, path: str, query: Mapping[str, Any] | None) -> str:
    missing = unresolved_placeholders(path)
    if missing:
        raise UnresolvedParameterError(path, missing)
    suffix = encode_query(query or {})
    return f"{url}?{suffix}" if suffix else url


def build_url_from_key(
    registry_url: str,
    base_path: str,
    endpoint: Endpoint,
    resource_uri: str,
    query: Mapping[str, Any] | None = None,
) -> str:
    """Build a URL from a concrete resource key instantiating the endpoint."""
    params = extract_path_parameters(resource_uri, endpoint.path)
    path = substitute(endpoint.path, params)
    return _finish(compose_url(registry_url, base_path, path), path, query)


def build_url_from_args(
    registry_url: str,
    base_path: str,
    endpoint: Endpoint,
    args: Mapping[str, Any],
) -> str:
    """Build a URL from a flat argument map."""
    path_values, query_values = split_arguments(endpoint, args)
    path = substitute(endpoint.path, path_values)
    return _finish(compose_url(registry_url, base_path, path), path, query_values)
