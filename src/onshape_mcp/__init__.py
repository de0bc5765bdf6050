"""Onshape MCP Server - AI assistant integration for Onshape.

This package provides an MCP (Model Context Protocol) server that exposes
the Onshape REST API as addressable resources and callable tools, so AI
assistants can read and edit Onshape CAD documents.

Example:
    Run the MCP server::

        $ onshape-mcp

    Or with Python::

        >>> from onshape_mcp.server import main
        >>> main()
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
