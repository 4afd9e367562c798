"""MCP stdio server exposing the catalog as tools, resources and templates.

The handlers below are thin adapters over QuayClient; create_server wires
them onto the mcp SDK's low-level Server.
"""

from __future__ import annotations

import json
from typing import Any

from anyio import to_thread
import mcp.types as types
from loguru import logger
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from .client import QuayClient, error_payload
from .dispatcher import ensure_json
from .errors import EndpointNotFoundError, InvocationError
from .surface import resource_templates, resources

SERVER_NAME = "quay-mcp"
SERVER_VERSION = "1.0.0"

MIME_TYPE = "application/json"


def list_tools(client: QuayClient) -> list[types.Tool]:
    return [
        types.Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
        for t in client.tool_surface
    ]


def list_resources(client: QuayClient) -> list[types.Resource]:
    return [
        types.Resource(uri=r.uri, name=r.name, description=r.description, mimeType=r.mime_type)
        for r in resources(client.catalog)
    ]


def list_resource_templates(client: QuayClient) -> list[types.ResourceTemplate]:
    return [
        types.ResourceTemplate(
            uriTemplate=r.uri, name=r.name, description=r.description, mimeType=r.mime_type,
        )
        for r in resource_templates(client.catalog)
    ]


def call_tool(client: QuayClient, name: str, arguments: dict[str, Any] | None) -> str:
    """Invoke a tool and return JSON text; errors come back as payloads."""
    try:
        data = client.invoke(name, arguments or {})
    except InvocationError as e:
        logger.warning(f"Tool {name} failed: {e}")
        return json.dumps(error_payload(e, tool=name), indent=2)
    return ensure_json(data, name)


def read_resource(client: QuayClient, uri: str) -> str:
    """Read a resource URI and return JSON text; errors come back as payloads."""
    try:
        data = client.read_resource(uri)
    except EndpointNotFoundError:
        raise
    except InvocationError as e:
        logger.warning(f"Resource {uri} failed: {e}")
        endpoint = client.catalog.match(uri)
        context: dict[str, Any] = {"uri": uri}
        if endpoint is not None:
            context.update(method=endpoint.method, path=endpoint.path)
        return json.dumps(error_payload(e, **context), indent=2)
    return ensure_json(data, uri)


def create_server(client: QuayClient) -> Server:
    """Create the low-level MCP server for an already discovered client."""
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tools(client)

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        logger.debug(f"Calling tool: {name} with args: {arguments}")
        text = await to_thread.run_sync(call_tool, client, name, arguments)
        return [types.TextContent(type="text", text=text)]

    @server.list_resources()
    async def handle_list_resources() -> list[types.Resource]:
        return list_resources(client)

    @server.list_resource_templates()
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        return list_resource_templates(client)

    @server.read_resource()
    async def handle_read_resource(uri) -> list[ReadResourceContents]:
        text = await to_thread.run_sync(read_resource, client, str(uri))
        return [ReadResourceContents(content=text, mime_type=MIME_TYPE)]

    return server


async def serve(client: QuayClient) -> None:
    """Run the server over stdio until the client disconnects."""
    server = create_server(client)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
