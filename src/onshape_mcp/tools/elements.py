"""Element inspection tools for the Onshape MCP Server.

This module provides read-only tools that work on any element state:
bounding boxes for parts and whole elements, and configuration
definitions.
"""

from typing import Annotated

from pydantic import Field

from onshape_mcp.client import OnshapeClient
from onshape_mcp.locator import quote_id, rest_path, state_path
from onshape_mcp.registry import OperationRegistry
from onshape_mcp.tools.utils import (
    Configuration,
    DocumentId,
    ElementId,
    LinkDocumentId,
    StateId,
    StateToken,
    format_bounding_box,
    make_address,
)

BOUNDING_BOX_ENDPOINTS = {
    "PARTSTUDIO": "partstudios",
    "ASSEMBLY": "assemblies",
}


def register_element_tools(registry: OperationRegistry, client: OnshapeClient) -> None:
    """Register element inspection tools.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
    """

    @registry.tool()
    async def get_part_bounding_box(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: ElementId,
        part_id: Annotated[str, Field(description="The ID of the part.")],
        configuration: Configuration = None,
        link_document_id: LinkDocumentId = None,
    ) -> str:
        """Get the axis-aligned bounding box of a single part, in meters."""
        address = make_address(document_id, state, state_id, element_id)
        bbox = await client.request(
            "GET",
            f"/parts{rest_path(address)}/partid/{quote_id(part_id)}/boundingboxes",
            query={"configuration": configuration, "linkDocumentId": link_document_id},
        )
        return f"Bounding Box for Part {part_id}:\n" + format_bounding_box(bbox)

    @registry.tool()
    async def get_element_bounding_box(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: ElementId,
        configuration: Configuration = None,
        link_document_id: LinkDocumentId = None,
    ) -> str:
        """Get the bounding box of a whole Part Studio or Assembly, in meters."""
        address = make_address(document_id, state, state_id, element_id)
        element_info = await client.request(
            "GET", f"/documents{state_path(address)}/elements/{quote_id(element_id)}"
        )
        endpoint = BOUNDING_BOX_ENDPOINTS.get(element_info.get("elementType"))
        if endpoint is None:
            msg = (
                "Bounding box is only supported for Part Studio or Assembly elements "
                f"(Type: {element_info.get('prettyType')})."
            )
            raise ValueError(msg)

        bbox = await client.request(
            "GET",
            f"/{endpoint}{rest_path(address)}/boundingboxes",
            query={"configuration": configuration, "linkDocumentId": link_document_id},
        )
        return (
            f'Bounding Box for Element "{element_info.get("name")}" (ID: {element_id}):\n'
            + format_bounding_box(bbox)
        )

    @registry.tool()
    async def get_element_configuration_definition(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: ElementId,
        link_document_id: LinkDocumentId = None,
    ) -> str:
        """List the configuration parameters an element defines."""
        address = make_address(document_id, state, state_id, element_id)
        definition = await client.request(
            "GET",
            f"/elements{rest_path(address)}/configuration",
            query={"linkDocumentId": link_document_id},
        )

        output = f'Configuration Definition for Element "{element_id}":\n'
        parameters = definition.get("configurationParameters") or []
        if not parameters:
            return output + "This element has no configuration parameters.\n"

        output += "Parameters:\n"
        for param in parameters:
            output += (
                f'- "{param.get("parameterName")}" (ID: {param.get("parameterId")}, '
                f"Type: {param.get('parameterType')})\n"
            )
            if param.get("description"):
                output += f"  Description: {param['description']}\n"
            options = param.get("options") or []
            if options:
                labels = [
                    str(opt.get("optionName") or opt.get("option"))
                    if isinstance(opt, dict)
                    else str(opt)
                    for opt in options
                ]
                output += f"  Options: {', '.join(labels)}\n"
        output += f"\nSource Microversion: {definition.get('sourceMicroversion')}\n"
        return output
