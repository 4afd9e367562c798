"""Exception types raised by the discovery, catalog and invocation layers.

DiscoveryError and CatalogError are terminal: the server never becomes
ready. Everything under InvocationError is local to a single call.
"""

from __future__ import annotations

from enum import Enum


class QuayMCPError(Exception):
    """Base class for all quay-mcp errors."""


class DiscoveryError(QuayMCPError):
    """The API description could not be fetched or parsed."""


class CatalogError(QuayMCPError):
    """Endpoints collapsed onto one resource key or tool name, or used a reserved name."""


class ConfigError(QuayMCPError):
    """A configuration value could not be interpreted."""


class InvocationError(QuayMCPError):
    """A single tool invocation failed."""


class EndpointNotFoundError(InvocationError):
    """No cataloged endpoint matches the requested key, name or URI."""


class UnresolvedParameterError(InvocationError):
    """A path placeholder had no matching argument."""

    def __init__(self, path: str, missing: list[str] | tuple[str, ...]):
        self.path = path
        self.missing = tuple(missing)
        names = ", ".join(self.missing)
        super().__init__(f"Unresolved path parameters for {path}: {names}")


class InvalidArgumentError(InvocationError):
    """An argument value cannot be rendered into a URL."""

    def __init__(self, name: str, value: object, reason: str | None = None):
        self.name = name
        self.value = value
        if reason is None:
            reason = f"has unsupported type {type(value).__name__}"
        super().__init__(f"Argument {name!r} {reason}")


class CallErrorKind(str, Enum):
    NETWORK_FAILURE = "network_failure"
    UPSTREAM_STATUS = "upstream_status"


class CallError(InvocationError):
    """The outbound request failed at the transport or returned non-2xx."""

    def __init__(
        self,
        kind: CallErrorKind,
        message: str,
        status_code: int | None = None,
        body: str = "",
    ):
        self.kind = kind
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def network_failure(cls, url: str, cause: Exception) -> CallError:
        return cls(CallErrorKind.NETWORK_FAILURE, f"Request to {url} failed: {cause}")

    @classmethod
    def upstream_status(cls, url: str, status_code: int, body: str) -> CallError:
        return cls(
            CallErrorKind.UPSTREAM_STATUS,
            f"API request failed with status {status_code}: {body}",
            status_code=status_code,
            body=body,
        )
