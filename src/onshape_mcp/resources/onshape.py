"""Onshape MCP resources for reading document state.

Resources provide read-only, URI-addressable summaries of Onshape
documents. Each handler receives the Address parsed from the requested URI
and returns plain text; writes are done with tools.

Resource URIs:
    - onshape://document/{documentId}
    - onshape://document/{documentId}/{state}/{stateId}
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId}
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId}/part/{partId}
"""

import json

from onshape_mcp.client import OnshapeClient
from onshape_mcp.locator import (
    Address,
    AddressLevel,
    Microversion,
    Version,
    Workspace,
    build_uri,
    quote_id,
    rest_path,
    state_path,
)
from onshape_mcp.registry import OperationRegistry

PART_PROPERTIES = ("Name", "Part Number", "Revision", "Material", "State")

ELEMENT_TOOL_HINTS = {
    "PARTSTUDIO": (
        "Part Studio",
        [
            "get_part_studio_features",
            "list_part_studio_feature_specs",
            "add_part_studio_feature (Workspace only)",
            "update_part_studio_feature (Workspace only)",
            "delete_part_studio_feature (Workspace only)",
            "get_part_bounding_box (requires partId)",
            "get_element_bounding_box",
            "list_part_studio_sketches",
        ],
    ),
    "ASSEMBLY": (
        "Assembly",
        [
            "get_assembly_definition",
            "add_assembly_instance (Workspace only)",
            "transform_assembly_instances (Workspace only)",
            "get_part_bounding_box (requires partId)",
            "get_element_bounding_box",
        ],
    ),
}


def register_resources(registry: OperationRegistry, client: OnshapeClient) -> None:
    """Register Onshape resources.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
    """

    @registry.resource(AddressLevel.DOCUMENT)
    async def resource_document(address: Address) -> str:
        """Onshape document summary, with a link to its default workspace."""
        doc_info = await client.request("GET", rest_path(address))

        text = f"Onshape Document: {doc_info.get('name')}\n"
        text += f"ID: {doc_info.get('id', address.document_id)}\n"
        text += f"Description: {doc_info.get('description') or 'N/A'}\n"
        text += f"Owner: {(doc_info.get('owner') or {}).get('name') or 'N/A'}\n"
        text += f"Modified At: {doc_info.get('modifiedAt')}\n"
        text += f"Created At: {doc_info.get('createdAt')}\n"

        workspace = doc_info.get("defaultWorkspace") or {}
        if workspace.get("id"):
            uri = build_uri(Address(address.document_id, Workspace(workspace["id"])))
            text += (
                f"Default Workspace: {workspace.get('name')} "
                f"(ID: {workspace['id']}) - @state({uri})\n"
            )
        return text

    @registry.resource(AddressLevel.STATE)
    async def resource_state(address: Address) -> str:
        """Workspace, version, or microversion of a document."""
        state = address.state
        info = await client.request("GET", rest_path(address))

        text = (
            f"Onshape Document {address.document_id} - "
            f"{state.token.upper()}: {state.id}\n"
        )
        if isinstance(state, Workspace):
            text += f'Workspace: "{info.get("name")}" (ID: {info.get("id")})\n'
            text += f"Microversion: {info.get('microversion')}\n"
            text += f"Modified At: {info.get('modifiedAt')}\n"
        elif isinstance(state, Version):
            text += f'Version: "{info.get("name")}" (ID: {info.get("id")})\n'
            text += f"Microversion: {info.get('microversion')}\n"
            text += f"Created At: {info.get('createdAt')}\n"
        elif isinstance(state, Microversion):
            text += f"Microversion ID: {info.get('microversion')}\n"

        text += "\nUse the 'list_elements' tool with these parameters to see its contents."
        return text

    @registry.resource(AddressLevel.ELEMENT)
    async def resource_element(address: Address) -> str:
        """Element (Part Studio, Assembly, ...) summary with suggested tools."""
        element_info = await client.request(
            "GET",
            f"/documents{state_path(address)}/elements/{quote_id(address.element_id)}",
        )

        text = f'Onshape Element: "{element_info.get("name")}"\n'
        text += f"Type: {element_info.get('prettyType')}\n"
        text += f"ID: {address.element_id}\n"
        text += f"Document ID: {address.document_id}\n"
        text += f"{address.state.token.upper()} ID: {address.state.id}\n"
        if element_info.get("microversionId"):
            text += f"Microversion ID: {element_info['microversionId']}\n"
        if element_info.get("configuration"):
            text += f"Configuration: {element_info['configuration']}\n"

        hint = ELEMENT_TOOL_HINTS.get(element_info.get("elementType"))
        if hint is not None:
            label, tools = hint
            text += f"\nAvailable Tools for {label}:\n"
            text += "".join(f"- {tool}\n" for tool in tools)
        return text

    @registry.resource(AddressLevel.PART)
    async def resource_part(address: Address) -> str:
        """Part metadata: name, number, revision, material, and state."""
        metadata = await client.request("GET", f"/metadata{rest_path(address)}")

        text = f"Onshape Part (Identity: {address.part_id})\n"
        text += f"From Element ID: {address.element_id}\n"
        text += f"From Document ID: {address.document_id}\n"
        text += f"From {address.state.token.upper()} ID: {address.state.id}\n"

        properties = metadata.get("properties")
        if not isinstance(properties, list):
            return text + "Could not retrieve detailed properties.\n"
        by_name = {prop.get("name"): prop for prop in properties if isinstance(prop, dict)}
        for name in PART_PROPERTIES:
            if name in by_name:
                value = by_name[name].get("value")
                if isinstance(value, (dict, list)):
                    value = json.dumps(value)
                text += f"{name}: {value}\n"
        return text
