"""Onshape MCP Server entry point.

Builds the operation table once at startup, binds it to an MCP server
speaking JSON-RPC over stdio, and runs until the client disconnects.

Usage:
    onshape-mcp
    # or
    python -m onshape_mcp.server --log-level DEBUG
"""

import argparse
import logging
import sys
import uuid

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from onshape_mcp import __version__
from onshape_mcp.client import OnshapeClient
from onshape_mcp.config import ServerConfig, get_config
from onshape_mcp.errors import ConfigurationError
from onshape_mcp.registry import OperationRegistry, OperationTable
from onshape_mcp.resources import register_resources
from onshape_mcp.tools import register_all_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "onshape-mcp"

INSTRUCTIONS = """Tools and resources for reading and editing Onshape CAD documents.

WORKFLOW:
1. list_documents, then read onshape://document/{documentId} for its default workspace
2. list_elements to find Part Studios and Assemblies
3. get_part_studio_features before editing a Part Studio

IMPORTANT:
- Documents are addressed as onshape://document/{documentId}/{w|v|m}/{stateId}/...
- Versions (v) and microversions (m) are read-only; edits need a workspace (w)
- Feature edits are stamped with the microversion read just before the write;
  a skew warning means someone else changed the document in between
"""

_instance_id = str(uuid.uuid4())


def get_instance_id() -> str:
    """Get the unique identifier of this server process."""
    return _instance_id


def setup_logging(level: str) -> None:
    """Send log output to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_operation_table(
    client: OnshapeClient, config: ServerConfig | None = None
) -> OperationTable:
    """Register every resource and tool and freeze the result.

    Raises:
        DuplicateOperationError: If two operations share a name.
    """
    document_list_limit = config.document_list_limit if config is not None else 20
    registry = OperationRegistry()
    register_resources(registry, client)
    register_all_tools(registry, client, document_list_limit)
    return registry.freeze()


def create_server(table: OperationTable) -> Server:
    """Create an MCP server that dispatches through an operation table.

    Args:
        table: Frozen operation table built at startup.

    Returns:
        Low-level MCP server with tool and resource handlers installed.
    """
    server = Server(SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=op.name,
                description=op.description,
                inputSchema=op.input_schema,
            )
            for op in table.tools()
        ]

    @server.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        return [
            types.ResourceTemplate(
                uriTemplate=op.uri_template,
                name=op.name,
                description=op.description,
                mimeType="text/plain",
            )
            for op in table.resources()
        ]

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        # Everything is addressed through the templates above
        return []

    # Tool calls and resource reads bypass the SDK's own wrapping: the table
    # validates arguments and builds the isError envelope itself.
    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await table.call_tool(
            request.params.name, request.params.arguments or {}
        )
        return types.ServerResult(
            types.CallToolResult(
                content=[types.TextContent(type="text", text=text) for text in result.content],
                isError=result.is_error,
            )
        )

    async def read_resource(request: types.ReadResourceRequest) -> types.ServerResult:
        uri = request.params.uri
        result = await table.read_resource(str(uri))
        return types.ServerResult(
            types.ReadResourceResult(
                contents=[
                    types.TextResourceContents(uri=uri, mimeType="text/plain", text=result.text)
                ],
                isError=result.is_error,
            )
        )

    server.request_handlers[types.CallToolRequest] = call_tool
    server.request_handlers[types.ReadResourceRequest] = read_resource
    return server


async def serve(config: ServerConfig) -> None:
    """Run the MCP server over stdio until the client disconnects.

    Raises:
        ConfigurationError: If credentials are required but missing.
    """
    async with OnshapeClient.from_config(config) as client:
        table = build_operation_table(client, config)
        logger.info(
            "Registered %d tools and %d resources against %s",
            len(table.tools()),
            len(table.resources()),
            client.base_url,
        )
        server = create_server(table)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def main() -> None:
    """Main entry point for the Onshape MCP Server."""
    parser = argparse.ArgumentParser(description="Onshape MCP Server")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides ONSHAPE_LOG_LEVEL)",
    )
    args = parser.parse_args()

    config = get_config()
    setup_logging(args.log_level or config.log_level)

    # stderr only: stdout is reserved for JSON-RPC in stdio mode
    print(f"ONSHAPE_MCP_INSTANCE_ID={get_instance_id()}", file=sys.stderr)
    logger.info("Starting Onshape MCP Server (%s)", config.api_url)

    try:
        anyio.run(serve, config)
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
