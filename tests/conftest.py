"""Shared fixtures for quay-mcp tests.

HTTP is faked with httpx.MockTransport; no test talks to a live registry.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

import httpx
import pytest

from quay_mcp.client import QuayClient


REGISTRY_URL = "https://quay.example.com"


# ---------------------------------------------------------------------------
# Discovery document: a trimmed Quay Swagger 2.0 description
# ---------------------------------------------------------------------------

SWAGGER: dict[str, Any] = {
    "swagger": "2.0",
    "host": "quay.example.com",
    "basePath": "/",
    "schemes": ["https"],
    "info": {"title": "Quay Frontend", "version": "v1"},
    "parameters": {
        "repositoryPath": {
            "name": "repository",
            "in": "path",
            "required": True,
            "type": "string",
            "description": "The full path of the repository. e.g. namespace/name",
        },
    },
    "paths": {
        "/api/v1/repository": {
            "get": {
                "summary": "Fetch the list of repositories visible to the current user.",
                "operationId": "listRepos",
                "tags": ["repository"],
                "parameters": [
                    {"name": "namespace", "in": "query", "type": "string",
                     "description": "Filters the repositories returned to this namespace"},
                    {"name": "public", "in": "query", "type": "boolean",
                     "description": "Adds any repositories visible to the user by virtue of being public"},
                    {"name": "next_page", "in": "query", "type": "string"},
                ],
            },
            "post": {
                "summary": "Create a new repository.",
                "operationId": "createRepo",
                "tags": ["repository"],
            },
        },
        "/api/v1/repository/{namespace}/{repository}": {
            "get": {
                "summary": "Get repository",
                "description": "Fetch the specified <b>repository</b>.",
                "operationId": "getRepository",
                "tags": ["repository"],
                "parameters": [
                    {"name": "includeTags", "in": "query", "type": "boolean"},
                ],
            },
        },
        "/api/v1/repository/{repository}/tag/": {
            "parameters": [{"$ref": "#/parameters/repositoryPath"}],
            "get": {
                "summary": "List tags",
                "operationId": "listRepoTags",
                "tags": ["tag"],
                "parameters": [
                    {"name": "onlyActiveTags", "in": "query", "type": "boolean"},
                    {"name": "page", "in": "query", "type": "integer"},
                ],
            },
        },
        "/api/v1/user/": {
            "get": {
                "summary": "Get user information for the authenticated user.",
                "operationId": "getLoggedInUser",
                "tags": ["user"],
            },
        },
        "/api/v1/plans/": {
            "get": {
                "summary": "List the avaialble plans.",
                "operationId": "listPlans",
                "tags": ["plans"],
            },
        },
        "/api/v1/organization/{orgname}/invoices": {
            "get": {
                "summary": "List the invoices for the specified orgnaization.",
                "operationId": "listOrgInvoices",
                "tags": ["billing"],
            },
        },
    },
}


@pytest.fixture
def swagger() -> dict[str, Any]:
    """A fresh copy of the discovery document."""
    return copy.deepcopy(SWAGGER)


# ---------------------------------------------------------------------------
# Mock registry
# ---------------------------------------------------------------------------

class RecordingRegistry:
    """A scripted registry: path -> (status, body). Records every request."""

    def __init__(self, routes: dict[str, tuple[int, Any]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(request.url.path, (404, {"error": "not found"}))
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        if isinstance(body, str):
            body = body.encode()
        return httpx.Response(status, content=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def registry() -> Callable[[dict[str, tuple[int, Any]]], RecordingRegistry]:
    """Return a factory for scripted registries."""
    return RecordingRegistry


@pytest.fixture
def quay(swagger) -> RecordingRegistry:
    """A registry serving the discovery document and a few API responses."""
    return RecordingRegistry({
        "/api/v1/discovery": (200, swagger),
        "/api/v1/repository": (200, {"repositories": [{"namespace": "redhat", "name": "clair"}]}),
        "/api/v1/repository/myorg/myrepo": (200, {"namespace": "myorg", "name": "myrepo"}),
        "/api/v1/user/": (200, {"username": "tester"}),
        "/api/v1/repository/redhat/tag/": (200, "not json at all"),
    })


@pytest.fixture
def client(quay) -> QuayClient:
    """A discovered client backed by the mock registry."""
    c = QuayClient(REGISTRY_URL, "test-token", transport=quay.transport)
    c.discover()
    return c
