"""MCP resource implementations for Onshape.

This package contains the MCP resource definitions for reading Onshape
document state. Resources provide read-only access via URI-addressable
endpoints, one per address level.

Available resources:
    - onshape://document/{documentId} - Document details
    - onshape://document/{documentId}/{state}/{stateId} - Workspace, version, or microversion
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId} - Element details
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId}/part/{partId} - Part metadata
"""

from onshape_mcp.resources.onshape import register_resources

__all__ = ["register_resources"]
