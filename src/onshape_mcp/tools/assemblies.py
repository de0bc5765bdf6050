"""Assembly tools for the Onshape MCP Server.

This module provides tools to inspect an Assembly definition, insert
instances of Part Studios, parts, or sub-assemblies, and reposition
existing occurrences. Insertions and transforms are workspace-only.
"""

from typing import Annotated, Any

from pydantic import Field

from onshape_mcp.client import OnshapeClient
from onshape_mcp.locator import rest_path
from onshape_mcp.registry import OperationRegistry
from onshape_mcp.tools.utils import (
    Configuration,
    DocumentId,
    StateId,
    StateToken,
    Transform,
    WorkspaceId,
    make_address,
    state_heading,
    workspace_address,
)

AssemblyId = Annotated[str, Field(description="The ID of the Assembly element.")]

EXAMPLE_LIMIT = 5


def register_assembly_tools(registry: OperationRegistry, client: OnshapeClient) -> None:
    """Register Assembly tools.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
    """

    @registry.tool()
    async def get_assembly_definition(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: AssemblyId,
        configuration: Configuration = None,
        exploded_view_id: Annotated[
            str | None, Field(description="Optional: The ID of the exploded view.")
        ] = None,
        include_mate_features: Annotated[
            bool | None,
            Field(description="Optional: Include mate features. Defaults to false."),
        ] = None,
        include_non_solids: Annotated[
            bool | None,
            Field(description="Optional: Include non-solid geometry. Defaults to false."),
        ] = None,
        include_mate_connectors: Annotated[
            bool | None,
            Field(description="Optional: Include mate connectors. Defaults to false."),
        ] = None,
        exclude_suppressed: Annotated[
            bool | None,
            Field(description="Optional: Exclude suppressed instances/features. Defaults to false."),
        ] = None,
    ) -> str:
        """Summarize an Assembly: root instances, sub-assemblies, and parts.

        The full definition can be very large, so only counts and the first
        few instances and parts are listed.
        """
        address = make_address(document_id, state, state_id, element_id)
        definition = await client.request(
            "GET",
            f"/assemblies{rest_path(address)}",
            query={
                "configuration": configuration,
                "explodedViewId": exploded_view_id,
                "includeMateFeatures": include_mate_features,
                "includeNonSolids": include_non_solids,
                "includeMateConnectors": include_mate_connectors,
                "excludeSuppressed": exclude_suppressed,
            },
        )

        output = f'Assembly Definition for "{element_id}" ({state_heading(address.state)}):\n'
        root = definition.get("rootAssembly")
        if root:
            instances = root.get("instances") or []
            output += "Root Assembly:\n"
            output += f"  Instances: {len(instances)}\n"
            output += f"  Features: {len(root.get('features') or [])}\n"
            if instances:
                output += "  Example Instances:\n"
                for inst in instances[:EXAMPLE_LIMIT]:
                    output += (
                        f'    - "{inst.get("name")}" (ID: {inst.get("id")}, '
                        f"Type: {inst.get('type')}, Part ID: {inst.get('partId') or 'N/A'})\n"
                    )
                if len(instances) > EXAMPLE_LIMIT:
                    output += f"    (...{len(instances) - EXAMPLE_LIMIT} more instances)\n"

        sub_assemblies = definition.get("subAssemblies") or []
        if sub_assemblies:
            output += f"Sub-Assemblies: {len(sub_assemblies)}\n"

        parts = definition.get("parts") or []
        if parts:
            output += f"Parts (Instances): {len(parts)}\n"
            output += "  Example Parts:\n"
            for part in parts[:EXAMPLE_LIMIT]:
                output += (
                    f"    - Type: {part.get('bodyType')}, Doc ID: {part.get('documentId')}, "
                    f"Elem ID: {part.get('elementId')}, Part ID: {part.get('partId')}\n"
                )
            if len(parts) > EXAMPLE_LIMIT:
                output += f"    (...{len(parts) - EXAMPLE_LIMIT} more parts)\n"
        return output

    @registry.tool()
    async def add_assembly_instance(
        document_id: Annotated[
            str, Field(description="The ID of the target document (where the Assembly resides).")
        ],
        workspace_id: WorkspaceId,
        assembly_element_id: AssemblyId,
        source_document_id: Annotated[
            str, Field(description="The ID of the document containing the element to instance.")
        ],
        source_element_id: Annotated[
            str,
            Field(description="The ID of the element (Part Studio, Assembly, Part, etc.) to instance."),
        ],
        source_version_id: Annotated[
            str | None,
            Field(description="Optional: The ID of the version of the source document/element."),
        ] = None,
        source_microversion_id: Annotated[
            str | None,
            Field(description="Optional: The ID of the microversion of the source document/element."),
        ] = None,
        source_part_id: Annotated[
            str | None,
            Field(description="Optional: The ID of a specific part within the source element to instance."),
        ] = None,
        source_configuration: Annotated[
            str | None,
            Field(description="Optional: The configuration string (URL-encoded) of the source element/part."),
        ] = None,
        transform: Annotated[
            Transform | None,
            Field(
                description=(
                    "Optional: A 4x4 transformation matrix (12 numbers, 3 rows by 4 "
                    "columns) as a flat array. If omitted, the instance is placed at "
                    "the origin."
                )
            ),
        ] = None,
    ) -> str:
        """Insert an instance of a Part Studio, part, or assembly into an Assembly."""
        address = workspace_address(document_id, workspace_id, assembly_element_id)
        body: dict[str, Any] = {
            "documentId": source_document_id,
            "elementId": source_element_id,
        }
        optional = {
            "versionId": source_version_id,
            "microversionId": source_microversion_id,
            "partId": source_part_id,
            "configuration": source_configuration,
            "transform": transform,
        }
        body.update({key: value for key, value in optional.items() if value is not None})

        response = await client.request(
            "POST", f"/assemblies{rest_path(address)}/instances", body
        )
        output = "Assembly instance added successfully.\n"
        if response.get("name"):
            output += f'Instance name: "{response["name"]}"\n'
        if response.get("id"):
            output += f"Instance ID: {response['id']}\n"
        return output

    @registry.tool()
    async def transform_assembly_instances(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        assembly_element_id: AssemblyId,
        occurrences: Annotated[
            list[dict[str, Any]],
            Field(
                description=(
                    "Occurrences to transform. Each matches the BTOccurrence-74 "
                    'structure { "path": [instance IDs from the root down] }.'
                )
            ),
        ],
        transform: Transform,
        is_relative: Annotated[
            bool | None,
            Field(description="Optional: If true, the transform is applied relative to the current position. Defaults to false (absolute transform)."),
        ] = None,
    ) -> str:
        """Move or rotate existing Assembly occurrences."""
        address = workspace_address(document_id, workspace_id, assembly_element_id)
        body: dict[str, Any] = {"occurrences": occurrences, "transform": transform}
        if is_relative is not None:
            body["isRelative"] = is_relative

        await client.request(
            "POST", f"/assemblies{rest_path(address)}/transformoccurrences", body
        )
        return (
            f"Assembly instances transformed successfully "
            f"({len(occurrences)} occurrence(s)).\n"
        )
