"""Process configuration read from the environment.

QUAY_URL           registry base URL (e.g. https://quay.io)
QUAY_OAUTH_TOKEN   optional OAuth bearer token
QUAY_ALLOWED_TAGS  comma-separated tag allow-list (default: read-only categories)
QUAY_TIMEOUT       per-request timeout in seconds (default 30)
QUAY_LOG_LEVEL     loguru level for stderr output (default WARNING)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .catalog import DEFAULT_ALLOWED_TAGS
from .errors import ConfigError
from .loader import DEFAULT_TIMEOUT


def parse_tags(value: str | None) -> frozenset[str]:
    """Split a comma-separated tag list; blank input yields the defaults."""
    if not value or not value.strip():
        return DEFAULT_ALLOWED_TAGS
    return frozenset(t.strip() for t in value.split(",") if t.strip())


def parse_timeout(value: str | None) -> float:
    """Parse a timeout in seconds; blank input yields the default."""
    if not value or not value.strip():
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigError(f"QUAY_TIMEOUT must be a number of seconds, got {value!r}") from None
    if timeout <= 0:
        raise ConfigError(f"QUAY_TIMEOUT must be positive, got {value!r}")
    return timeout


@dataclass(frozen=True)
class Settings:
    registry_url: str = ""
    token: str | None = None
    allowed_tags: frozenset[str] = DEFAULT_ALLOWED_TAGS
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if env is None else env
        timeout = parse_timeout(env.get("QUAY_TIMEOUT"))
        return cls(
            registry_url=env.get("QUAY_URL", "").rstrip("/"),
            token=env.get("QUAY_OAUTH_TOKEN") or None,
            allowed_tags=parse_tags(env.get("QUAY_ALLOWED_TAGS")),
            timeout=timeout,
            log_level=env.get("QUAY_LOG_LEVEL", "WARNING").upper(),
        )
