"""Fetch and load the registry's API description.

Quay serves its Swagger document at /api/v1/discovery; older or proxied
deployments expose it at /discovery instead.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from .errors import DiscoveryError

DISCOVERY_PATH = "/api/v1/discovery"
FALLBACK_DISCOVERY_PATH = "/discovery"

DEFAULT_TIMEOUT = 30.0


def _decode(body: bytes | str, source: str) -> dict[str, Any]:
    try:
        spec = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DiscoveryError(f"Failed to parse API description from {source}: {e}") from e
    if not isinstance(spec, dict):
        raise DiscoveryError(f"API description from {source} is not a JSON object")
    return spec


def fetch_spec(
    registry_url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """Fetch the discovery document, falling back once on 404."""
    base = registry_url.rstrip("/")
    url = base + DISCOVERY_PATH

    with httpx.Client(timeout=timeout, transport=transport, follow_redirects=True) as client:
        try:
            response = client.get(url, headers={"Accept": "application/json"})
            if response.status_code == 404:
                logger.debug(f"{url} returned 404, trying fallback discovery path")
                url = base + FALLBACK_DISCOVERY_PATH
                response = client.get(url, headers={"Accept": "application/json"})
        except httpx.RequestError as e:
            raise DiscoveryError(f"Failed to fetch API description from {url}: {e}") from e

    if not response.is_success:
        raise DiscoveryError(
            f"Failed to fetch API description from {url}: status code {response.status_code}"
        )
    return _decode(response.content, url)


def load_spec(path: Path | str) -> dict[str, Any]:
    """Load a saved discovery document from disk."""
    spec_file = Path(path)
    try:
        with open(spec_file, "rb") as f:
            return _decode(f.read(), str(spec_file))
    except OSError as e:
        raise DiscoveryError(f"Failed to read API description {spec_file}: {e}") from e


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    if not ref.startswith("#/"):
        raise DiscoveryError(f"Unsupported $ref {ref!r}")
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise DiscoveryError(f"Unresolvable $ref {ref!r}")
        node = node[part]
    return node
