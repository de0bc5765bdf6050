"""Part Studio tools for the Onshape MCP Server.

This module provides tools to inspect and edit the feature list of a Part
Studio, and to inspect its sketches.

Feature edits (add, update, delete) are only possible in a workspace and go
through the version-stamped mutation protocol in onshape_mcp.mutation: the
current feature list is read immediately before every write so the write
carries fresh serialization, library, and microversion stamps.
"""

import json
from typing import Annotated, Any

from pydantic import Field

from onshape_mcp import mutation
from onshape_mcp.client import OnshapeClient
from onshape_mcp.locator import rest_path
from onshape_mcp.registry import OperationRegistry
from onshape_mcp.tools.utils import (
    Configuration,
    DocumentId,
    LinkDocumentId,
    StateId,
    StateToken,
    WorkspaceId,
    format_mutation,
    format_notices,
    make_address,
    state_heading,
    workspace_address,
)

PartStudioId = Annotated[str, Field(description="The ID of the Part Studio element.")]
FeatureId = Annotated[
    str,
    Field(description="The ID of the feature. Obtain this from get_part_studio_features."),
]
FeatureDefinition = Annotated[
    dict[str, Any],
    Field(
        description=(
            "The JSON object representing the FeatureScript feature definition "
            "(e.g., Sketch, Extrude, Pattern). Refer to Onshape's FeatureScript and "
            "API documentation for the required structure "
            "(BTFeatureDefinitionCall-1406 -> feature field)."
        )
    ),
]


def register_partstudio_tools(registry: OperationRegistry, client: OnshapeClient) -> None:
    """Register Part Studio tools.

    Args:
        registry: Operation registry being populated at startup.
        client: Onshape API client shared by all handlers.
    """

    @registry.tool()
    async def list_part_studio_feature_specs(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: PartStudioId,
    ) -> str:
        """List the feature types available in a Part Studio."""
        address = make_address(document_id, state, state_id, element_id)
        specs = await client.request(
            "GET", f"/partstudios{rest_path(address)}/featurespecs"
        )
        output = f'Available Feature Specs for Part Studio "{element_id}":\n'
        feature_specs = specs.get("featureSpecs") or []
        if not feature_specs:
            return output + "No feature specs found for this Part Studio.\n"
        for spec in feature_specs:
            output += (
                f'- "{spec.get("featureTypeName")}" (Type: {spec.get("featureType")}, '
                f"Namespace: {spec.get('namespace')})\n"
            )
        output += (
            "\nTo use a feature, call 'add_part_studio_feature' or "
            "'update_part_studio_feature' with the correct JSON payload. Refer to "
            "Onshape's FeatureScript and REST API documentation for required parameters."
        )
        return output

    @registry.tool()
    async def get_part_studio_features(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: PartStudioId,
        configuration: Configuration = None,
        link_document_id: LinkDocumentId = None,
    ) -> str:
        """List the features currently in a Part Studio, in order.

        Also reports the source microversion the list was read at.
        """
        address = make_address(document_id, state, state_id, element_id)
        features = await client.request(
            "GET",
            f"/partstudios{rest_path(address)}/features",
            query={"configuration": configuration, "linkDocumentId": link_document_id},
        )
        output = f'Features in Part Studio "{element_id}" ({state_heading(address.state)}):\n'
        items = features.get("features") or []
        if not items:
            return output + "No features found in this Part Studio.\n"
        for feature in items:
            status = "Suppressed" if feature.get("suppressed") else "Active"
            feature_type = feature.get("featureType") or feature.get("btType")
            output += (
                f'- "{feature.get("name")}" (ID: {feature.get("featureId")}, '
                f"Type: {feature_type}) - {status}\n"
            )
        output += f"\nSource Microversion for edits: {features.get('sourceMicroversion')}\n"
        return output

    @registry.tool()
    async def add_part_studio_feature(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        element_id: PartStudioId,
        feature: FeatureDefinition,
    ) -> str:
        """Add a feature to a Part Studio (workspace only).

        The feature list is read first so the write is stamped with the
        current serialization version, library version, and microversion.
        A feature that evaluates to an error is still saved; the response
        then carries a warning with the error message.
        """
        address = workspace_address(document_id, workspace_id, element_id)
        result = await mutation.add_feature(client.request, address, feature)

        output = "Feature added successfully."
        added = result.response.get("feature") or {}
        if added.get("name"):
            output += f' Name: "{added["name"]}"'
        if added.get("featureId"):
            output += f" (ID: {added['featureId']})"
        output += "\n" + format_mutation(result, "added")
        return output

    @registry.tool()
    async def update_part_studio_feature(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        element_id: PartStudioId,
        feature_id: FeatureId,
        feature: Annotated[
            dict[str, Any],
            Field(
                description=(
                    "The JSON object representing the updated FeatureScript feature "
                    "definition. Must include the matching featureId."
                )
            ),
        ],
    ) -> str:
        """Update an existing feature in a Part Studio (workspace only).

        Stamped with fresh version information like add_part_studio_feature.
        """
        address = workspace_address(document_id, workspace_id, element_id)
        result = await mutation.update_feature(client.request, address, feature_id, feature)
        return f'Feature "{feature_id}" updated successfully.\n' + format_mutation(
            result, "updated"
        )

    @registry.tool()
    async def delete_part_studio_feature(
        document_id: DocumentId,
        workspace_id: WorkspaceId,
        element_id: PartStudioId,
        feature_id: FeatureId,
    ) -> str:
        """Delete a feature from a Part Studio (workspace only)."""
        address = workspace_address(document_id, workspace_id, element_id)
        result = await mutation.delete_feature(client.request, address, feature_id)

        output = f'Feature "{feature_id}" deleted successfully.\n'
        if result.skew_detected:
            output += "Warning: Microversion skew detected during deletion.\n"
        output += format_notices(result.notices, "Notices during deletion:")
        return output

    @registry.tool()
    async def list_part_studio_sketches(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        element_id: PartStudioId,
        configuration: Configuration = None,
        link_document_id: LinkDocumentId = None,
    ) -> str:
        """List the non-empty sketches in a Part Studio with their entity counts."""
        address = make_address(document_id, state, state_id, element_id)
        sketch_info = await client.request(
            "GET",
            f"/partstudios{rest_path(address)}/sketches",
            query={"configuration": configuration, "linkDocumentId": link_document_id},
        )
        output = f'Sketches in Part Studio "{element_id}" ({state_heading(address.state)}):\n'
        sketches = [
            (feature_id, data)
            for feature_id, data in _sketch_entries(sketch_info)
            if data.get("entities")
        ]
        if not sketches:
            return output + "No sketches found in this Part Studio.\n"
        for feature_id, data in sketches:
            output += f"- Feature ID: {feature_id}, Entities: {len(data['entities'])}\n"
        return output

    @registry.tool()
    async def get_sketch_tessellation(
        document_id: DocumentId,
        state: StateToken,
        state_id: StateId,
        part_studio_element_id: PartStudioId,
        sketch_feature_id: Annotated[
            str, Field(description="The ID of the sketch feature.")
        ],
        entity_id: Annotated[
            str | None, Field(description="Optional: The ID of a specific sketch entity.")
        ] = None,
        configuration: Configuration = None,
        link_document_id: LinkDocumentId = None,
        angle_tolerance: Annotated[
            float | None,
            Field(description="Optional: The angle tolerance value for tessellation."),
        ] = None,
        chord_tolerance: Annotated[
            float | None,
            Field(description="Optional: The chord tolerance value for tessellation."),
        ] = None,
    ) -> str:
        """Summarize the tessellated geometry of a sketch or one of its entities."""
        address = make_address(document_id, state, state_id, part_studio_element_id)
        data = await client.request(
            "GET",
            f"/partstudios{rest_path(address)}/sketches/{sketch_feature_id}/tessellatedentities",
            query={
                "entityId": entity_id,
                "configuration": configuration,
                "linkDocumentId": link_document_id,
                "angleTolerance": angle_tolerance,
                "chordTolerance": chord_tolerance,
            },
        )
        entity_note = f" Entity {entity_id}" if entity_id else ""
        output = f"Tessellation Data for Sketch {sketch_feature_id}{entity_note}:\n"
        if not isinstance(data, dict):
            return output + "Could not retrieve tessellation data.\n"

        output += f"  Contains data for {len(data)} entities.\n"
        if data:
            first_id, entity = next(iter(data.items()))
            output += f"  Example Entity ({first_id}): {_describe_entity(entity)}\n"
        return output


def _sketch_entries(sketch_info: Any) -> list[tuple[str, dict[str, Any]]]:
    """Normalize the sketches response into (feature ID, sketch) pairs.

    The endpoint returns either a {"sketches": [...]} list or a mapping of
    feature ID to sketch data.
    """
    if not isinstance(sketch_info, dict):
        return []
    if isinstance(sketch_info.get("sketches"), list):
        return [
            (str(sketch.get("featureId")), sketch)
            for sketch in sketch_info["sketches"]
            if isinstance(sketch, dict)
        ]
    return [
        (feature_id, data)
        for feature_id, data in sketch_info.items()
        if isinstance(data, dict)
    ]


def _describe_entity(entity: Any) -> str:
    if isinstance(entity, dict):
        if isinstance(entity.get("lines"), list):
            return f"has {len(entity['lines'])} line segments."
        if isinstance(entity.get("points"), list):
            # Flat [x0, y0, x1, y1, ...] list of 2D points
            return f"has {len(entity['points']) // 2} points."
    return f"structure unknown ({json.dumps(entity)[:80]})."
