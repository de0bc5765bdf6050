"""MCP tool implementations for Onshape.

This package contains all MCP tool definitions for working with Onshape
documents. Tools are organized by category:

- documents: Document and element listing, creation, and lookup
- partstudios: Part Studio feature list and sketch tools
- assemblies: Assembly definition, instance insertion, and transforms
- elements: Bounding boxes and configuration definitions
"""

from onshape_mcp.client import OnshapeClient
from onshape_mcp.registry import OperationRegistry
from onshape_mcp.tools.assemblies import register_assembly_tools
from onshape_mcp.tools.documents import register_document_tools
from onshape_mcp.tools.elements import register_element_tools
from onshape_mcp.tools.partstudios import register_partstudio_tools

__all__ = [
    "register_all_tools",
    "register_assembly_tools",
    "register_document_tools",
    "register_element_tools",
    "register_partstudio_tools",
]


def register_all_tools(
    registry: OperationRegistry, client: OnshapeClient, document_list_limit: int = 20
) -> None:
    """Register all Onshape tools.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
        document_list_limit: Number of documents returned by list_documents.
    """
    register_document_tools(registry, client, document_list_limit)
    register_partstudio_tools(registry, client)
    register_assembly_tools(registry, client)
    register_element_tools(registry, client)
