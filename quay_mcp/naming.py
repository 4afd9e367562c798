"""Derive MCP tool names from endpoints.

The operation id declared by the registry wins. Without one, the name is
synthesized from the path template: separators become underscores and
placeholder braces are dropped.

Examples:
  /api/v1/repository, operationId listRepos       -> listRepos
  /api/v1/repository/{namespace}/{repository}     -> api_v1_repository_namespace_repository
  /api/v1/superuser/logs                          -> api_v1_superuser_logs
  /                                                -> root
"""

from __future__ import annotations

import re

# Name used when a path reduces to nothing
ROOT_TOOL_NAME = "root"

_JOINER = "_"


def _sanitize(name: str) -> str:
    """Keep only characters MCP clients accept in tool names."""
    name = re.sub(r"[^A-Za-z0-9_\-]", _JOINER, name)
    name = re.sub(r"_+", _JOINER, name)
    return name.strip(_JOINER)


def name_from_path(path: str) -> str:
    """Synthesize a tool name from a path template."""
    segments = [s for s in path.split("/") if s]
    joined = _JOINER.join(segments).replace("{", "").replace("}", "")
    return _sanitize(joined) or ROOT_TOOL_NAME


def build_tool_name(path: str, operation_id: str | None = None) -> str:
    """Return the external tool name for an endpoint."""
    if operation_id:
        name = _sanitize(operation_id)
        if name:
            return name
    return name_from_path(path)
