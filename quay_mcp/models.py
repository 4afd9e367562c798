"""In-memory model of a discovered API description and its catalog.

Everything here is immutable once built so the catalog can be shared
across concurrent invocations without locking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    required: bool = False
    description: str = ""
    type: str = "string"
    enum: tuple[str, ...] | None = None


@dataclass(frozen=True)
class Operation:
    path: str
    method: str = "GET"
    summary: str = ""
    description: str = ""
    operation_id: str | None = None
    tags: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class SpecDocument:
    """Parsed discovery document: GET operations keyed by path template."""

    operations: Mapping[str, Operation] = field(default_factory=dict)
    host: str = ""
    base_path: str = ""
    schemes: tuple[str, ...] = ()
    title: str = ""
    version: str = ""
    skipped_methods: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", MappingProxyType(dict(self.operations)))


@dataclass(frozen=True)
class Endpoint:
    key: str
    path: str
    method: str = "GET"
    summary: str = ""
    description: str = ""
    operation_id: str | None = None
    tags: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()

    @classmethod
    def from_operation(cls, key: str, operation: Operation) -> Endpoint:
        return cls(
            key=key,
            path=operation.path,
            method=operation.method,
            summary=operation.summary,
            description=operation.description,
            operation_id=operation.operation_id,
            tags=operation.tags,
            parameters=operation.parameters,
        )

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Distinct placeholder names in template order."""
        return tuple(dict.fromkeys(_PLACEHOLDER.findall(self.path)))

    @property
    def query_parameters(self) -> tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.location == "query")

    @property
    def is_parameterized(self) -> bool:
        return bool(self.placeholders)


class Catalog(Mapping[str, Endpoint]):
    """Read-only mapping of resource key to Endpoint."""

    def __init__(self, endpoints: Mapping[str, Endpoint] | None = None, base_path: str = ""):
        self._endpoints = MappingProxyType(dict(sorted((endpoints or {}).items())))
        self.base_path = base_path

    def __getitem__(self, key: str) -> Endpoint:
        return self._endpoints[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def __repr__(self) -> str:
        return f"Catalog({len(self)} endpoints)"

    def match(self, resource_uri: str) -> Endpoint | None:
        """Find the endpoint a concrete resource URI was instantiated from.

        An exact key wins; otherwise the first template (in key order)
        whose placeholders all capture a segment of the URI.
        """
        from .url_builder import extract_path_parameters

        if resource_uri in self._endpoints:
            return self._endpoints[resource_uri]
        for endpoint in self._endpoints.values():
            if not endpoint.is_parameterized:
                continue
            params = extract_path_parameters(resource_uri, endpoint.path)
            if len(params) == len(endpoint.placeholders):
                return endpoint
        return None


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: dict[str, Any]
    endpoint_key: str

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    @property
    def optional(self) -> list[str]:
        required = set(self.required)
        return [p for p in self.input_schema.get("properties", {}) if p not in required]


@dataclass(frozen=True)
class ResourceView:
    uri: str
    name: str
    description: str
    mime_type: str = "application/json"
