"""Document and element tools for the Onshape MCP Server.

This module provides tools to list and create documents, list and create
elements (Part Studios and Assemblies) within a document state, look up
elements by name, and resolve addresses to resource URIs.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import Field

from onshape_mcp.client import OnshapeClient, find_element_by_name, get_default_workspace
from onshape_mcp.locator import Address, build_uri, rest_path, state_path, state_selector
from onshape_mcp.registry import OperationRegistry
from onshape_mcp.tools.utils import (
    DocumentId,
    StateId,
    StateToken,
    WorkspaceId,
    make_address,
    state_heading,
)

ElementType = Literal[
    "PARTSTUDIO",
    "ASSEMBLY",
    "DRAWING",
    "FEATURESTUDIO",
    "BLOB",
    "APPLICATION",
    "TABLE",
    "BILLOFMATERIALS",
    "VARIABLESTUDIO",
    "PUBLICATIONITEM",
]


def register_document_tools(
    registry: OperationRegistry, client: OnshapeClient, document_list_limit: int = 20
) -> None:
    """Register document-related tools.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
        document_list_limit: Number of documents returned by list_documents.
    """

    @registry.tool()
    async def list_documents() -> str:
        """Lists recent Onshape documents you own, providing their IDs and MCP resource URIs."""
        documents = await client.request(
            "GET", "/documents", query={"filter": 0, "limit": document_list_limit}
        )
        output = "Recent Documents (owned by you):\n"
        items = documents.get("items") or []
        if not items:
            return output + "No documents found.\n"
        for doc in items:
            uri = build_uri(Address(doc["id"]))
            output += f'- "{doc.get("name")}" (ID: {doc["id"]}) - @document({uri})\n'
        return output

    @registry.tool()
    async def create_document(
        name: Annotated[str, Field(description="The name for the new Onshape document.")],
    ) -> str:
        """Create a new Onshape document.

        Returns the created document JSON, including its default workspace.
        """
        new_doc = await client.request("POST", "/documents", {"name": name})
        return json.dumps(new_doc, indent=2)

    @registry.tool()
    async def list_elements(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_type: Annotated[
            ElementType | None,
            Field(description="Optional: Filter by element type. Defaults to PARTSTUDIO and ASSEMBLY."),
        ] = None,
    ) -> str:
        """List the elements (tabs) of a document workspace, version, or microversion."""
        address = make_address(document_id, state, state_id)
        elements = await client.request(
            "GET",
            f"/documents{state_path(address)}/elements",
            query={"elementType": element_type or "PARTSTUDIO,ASSEMBLY"},
        )
        type_note = f" (Type: {element_type})" if element_type else ""
        output = (
            f'Elements in document "{document_id}" ({state_heading(address.state)}){type_note}:\n'
        )
        if not elements:
            return output + "No elements found matching the criteria in this state.\n"
        for elem in elements:
            uri = build_uri(
                Address(document_id, address.state, element_id=elem["id"])
            )
            output += (
                f'- "{elem.get("name")}" (ID: {elem["id"]}, '
                f"Type: {elem.get('prettyType')}) - @element({uri})\n"
            )
        return output

    async def _create_element(
        kind: str, endpoint: str, document_id: str, workspace_id: str, name: str
    ) -> str:
        new_element = await client.request(
            "POST", f"/{endpoint}/d/{document_id}/w/{workspace_id}", {"name": name}
        )
        uri = build_uri(make_address(document_id, "w", workspace_id, new_element["id"]))
        return (
            f'Created {kind} "{new_element.get("name")}" (ID: {new_element["id"]}) '
            f"in document {document_id}/{workspace_id} - @element({uri})"
        )

    @registry.tool()
    async def create_part_studio(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        name: Annotated[str, Field(description="The name for the new Part Studio.")],
    ) -> str:
        """Create a new Part Studio in a document workspace."""
        return await _create_element(
            "Part Studio", "partstudios", document_id, workspace_id, name
        )

    @registry.tool()
    async def create_assembly(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        name: Annotated[str, Field(description="The name for the new Assembly.")],
    ) -> str:
        """Create a new Assembly in a document workspace."""
        return await _create_element(
            "Assembly", "assemblies", document_id, workspace_id, name
        )

    @registry.tool()
    async def find_element(
        document_id: DocumentId,
        name: Annotated[str, Field(description="Exact element name to look for.")],
        element_type: Annotated[
            Literal["PARTSTUDIO", "ASSEMBLY"],
            Field(description="Element type to search."),
        ] = "PARTSTUDIO",
        workspace_id: Annotated[
            str | None,
            Field(description="Optional: Workspace to search. Defaults to the document's default workspace."),
        ] = None,
    ) -> str:
        """Find a Part Studio or Assembly by name in a document workspace."""
        if workspace_id is None:
            workspace_id = await get_default_workspace(client, document_id)
            if workspace_id is None:
                msg = f"Document {document_id} has no default workspace"
                raise LookupError(msg)
        element: dict[str, Any] | None = await find_element_by_name(
            client, document_id, workspace_id, name, element_type
        )
        if element is None:
            return (
                f'No {element_type} named "{name}" found in document '
                f"{document_id}/{workspace_id}.\n"
            )
        uri = build_uri(make_address(document_id, "w", workspace_id, element["id"]))
        return (
            f'Found {element_type} "{element.get("name")}" (ID: {element["id"]}) '
            f"- @element({uri})\n"
        )

    @registry.tool()
    async def resolve_address(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: Annotated[
            str | None, Field(description="Optional: The ID of the element.")
        ] = None,
        part_id: Annotated[
            str | None,
            Field(description="Optional: The ID of a part. Requires elementId."),
        ] = None,
    ) -> str:
        """Show the MCP resource URI and REST path for a document location.

        Makes no API calls; use it to turn IDs into a resource URI to read.
        """
        selector = state_selector(state, state_id)
        address = Address(document_id, selector, element_id, part_id).validate()
        return (
            f"Document ID: {document_id}\n"
            f"{selector.label} ID: {selector.id}\n"
            + (f"Element ID: {element_id}\n" if element_id else "")
            + (f"Part ID: {part_id}\n" if part_id else "")
            + f"Resource URI: {build_uri(address)}\n"
            f"REST path: {rest_path(address)}\n"
        )

