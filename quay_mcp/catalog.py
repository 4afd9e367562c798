"""Build the Endpoint Catalog from the Spec Model.

Only GET operations carrying at least one pre-approved tag are kept. The
server makes live calls against a real registry with no confirmation
step, so anything outside those categories is never surfaced.
"""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from .errors import CatalogError
from .models import Catalog, Endpoint, SpecDocument
from .url_builder import RESOURCE_SCHEME

# Read-only categories exposed when no tag list is configured
DEFAULT_ALLOWED_TAGS: frozenset[str] = frozenset({
    "build",
    "discovery",
    "manifest",
    "organization",
    "repository",
    "search",
    "secscan",
    "tag",
    "team",
    "user",
})


def resource_key(path: str) -> str:
    """Map a path template to its resource key: quay:// + path sans leading /."""
    if path.startswith("/"):
        path = path[1:]
    return f"{RESOURCE_SCHEME}{path}"


def is_allowed(tags: Iterable[str], allowed_tags: Iterable[str]) -> bool:
    """Check whether any tag is in the allowed set (exact, case-sensitive)."""
    return not set(tags).isdisjoint(allowed_tags)


def build_catalog(spec: SpecDocument | None, allowed_tags: Iterable[str]) -> Catalog:
    """Filter the document's GET operations by tag and index them by resource key."""
    if spec is None or not spec.operations:
        return Catalog()

    allowed = frozenset(allowed_tags)
    endpoints: dict[str, Endpoint] = {}
    dropped = 0

    for path, operation in spec.operations.items():
        if operation.method != "GET":
            continue
        if not is_allowed(operation.tags, allowed):
            dropped += 1
            continue

        key = resource_key(path)
        existing = endpoints.get(key)
        if existing is not None:
            raise CatalogError(
                f"Resource key {key} is claimed by both {existing.path!r} and {path!r}"
            )
        endpoints[key] = Endpoint.from_operation(key, operation)

    logger.info(
        f"Cataloged {len(endpoints)} GET endpoints "
        f"({dropped} filtered by tag, {spec.skipped_methods} non-GET operations ignored)"
    )
    return Catalog(endpoints, base_path=spec.base_path)
