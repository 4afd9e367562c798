"""Client facade: one discovery, then stateless invocations."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import httpx
from loguru import logger

from .catalog import DEFAULT_ALLOWED_TAGS, build_catalog
from .dispatcher import Dispatcher
from .errors import CallError, CallErrorKind, EndpointNotFoundError, QuayMCPError, UnresolvedParameterError
from .loader import DEFAULT_TIMEOUT, fetch_spec
from .models import Catalog, Endpoint, SpecDocument, ToolDescriptor
from .schema_parser import parse_spec
from .surface import project
from .url_builder import RESOURCE_URI_ARG, build_url_from_args, build_url_from_key, split_arguments


class QuayClient:
    """Discover a registry's API once and invoke its cataloged endpoints."""

    def __init__(
        self,
        registry_url: str,
        token: str | None = None,
        *,
        allowed_tags: Iterable[str] = DEFAULT_ALLOWED_TAGS,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.registry_url = registry_url.rstrip("/")
        self.allowed_tags = frozenset(allowed_tags)
        self._timeout = timeout
        self._transport = transport
        self._dispatcher = Dispatcher(token=token, timeout=timeout, transport=transport)
        self._spec: SpecDocument | None = None
        self._catalog = Catalog()
        self._tools: tuple[ToolDescriptor, ...] = ()
        self._tools_by_name: dict[str, ToolDescriptor] = {}

    @property
    def spec(self) -> SpecDocument | None:
        return self._spec

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def tool_surface(self) -> list[ToolDescriptor]:
        return list(self._tools)

    def discover(self) -> None:
        """Fetch the API description and build catalog and tool surface.

        Raises DiscoveryError or CatalogError; either leaves the client
        with an empty catalog.
        """
        raw = fetch_spec(self.registry_url, timeout=self._timeout, transport=self._transport)
        spec = parse_spec(raw)
        logger.info(f"Loaded Quay API description with {len(spec.operations)} GET operations")

        catalog = build_catalog(spec, self.allowed_tags)
        tools = project(catalog)

        self._spec = spec
        self._catalog = catalog
        self._tools = tuple(tools)
        self._tools_by_name = {t.name: t for t in tools}

    def resolve(self, endpoint_key: str) -> Endpoint:
        """Look up an endpoint by resource key or tool name."""
        endpoint = self._catalog.get(endpoint_key)
        if endpoint is None and endpoint_key in self._tools_by_name:
            endpoint = self._catalog[self._tools_by_name[endpoint_key].endpoint_key]
        if endpoint is None:
            raise EndpointNotFoundError(f"No endpoint found for {endpoint_key!r}")
        return endpoint

    def build_url(self, endpoint: Endpoint, args: Mapping[str, Any] | None = None) -> str:
        args = args or {}
        base_path = self._catalog.base_path
        resource_uri = args.get(RESOURCE_URI_ARG)
        if resource_uri:
            _, query = split_arguments(endpoint, args)
            return build_url_from_key(self.registry_url, base_path, endpoint, str(resource_uri), query)
        return build_url_from_args(self.registry_url, base_path, endpoint, args)

    def invoke(self, endpoint_key: str, args: Mapping[str, Any] | None = None) -> bytes:
        """Call one endpoint with a flat argument map and return the raw body."""
        endpoint = self.resolve(endpoint_key)
        url = self.build_url(endpoint, args)
        return self._dispatcher.call(endpoint, url)

    def read_resource(self, uri: str) -> bytes:
        """Call the endpoint a concrete resource URI was instantiated from."""
        endpoint = self._catalog.match(uri)
        if endpoint is None:
            raise EndpointNotFoundError(f"endpoint not found for URI: {uri}")
        url = build_url_from_key(self.registry_url, self._catalog.base_path, endpoint, uri)
        return self._dispatcher.call(endpoint, url)


new_client = QuayClient


def error_payload(exc: QuayMCPError, **context: Any) -> dict[str, Any]:
    """Render an invocation error as structured data for the protocol boundary."""
    payload: dict[str, Any] = {
        "error": True,
        "status": None,
        "message": str(exc),
        "type": type(exc).__name__,
    }
    if isinstance(exc, CallError):
        payload["status"] = exc.status_code
        payload["kind"] = exc.kind.value
        if exc.kind is CallErrorKind.UPSTREAM_STATUS:
            payload["body"] = exc.body
    elif isinstance(exc, UnresolvedParameterError):
        payload["missing"] = list(exc.missing)
    payload.update(context)
    return payload
