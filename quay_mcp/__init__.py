"""Expose a Quay registry's read-only HTTP API as MCP tools."""

from .catalog import DEFAULT_ALLOWED_TAGS, build_catalog
from .client import QuayClient, new_client
from .errors import (
    CallError,
    CallErrorKind,
    CatalogError,
    ConfigError,
    DiscoveryError,
    EndpointNotFoundError,
    InvalidArgumentError,
    InvocationError,
    QuayMCPError,
    UnresolvedParameterError,
)
from .surface import project

__version__ = "1.0.0"
