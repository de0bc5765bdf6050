"""Utility functions for Onshape MCP tools.

This module provides shared argument types, address construction from tool
arguments, and text formatting used by several tool modules.
"""

from typing import Annotated, Any, Literal

from pydantic import Field

from onshape_mcp.locator import Address, StateSelector, state_selector
from onshape_mcp.mutation import MutationResult

DocumentId = Annotated[str, Field(description="The ID of the Onshape document.")]
WorkspaceId = Annotated[str, Field(description="The ID of the target workspace.")]
StateToken = Annotated[
    Literal["w", "v", "m"],
    Field(description="Whether the ID refers to a workspace (w), version (v), or microversion (m)."),
]
StateId = Annotated[
    str, Field(description="The ID of the workspace, version, or microversion.")
]
ElementId = Annotated[str, Field(description="The ID of the element.")]
Configuration = Annotated[
    str | None,
    Field(description="Optional: The configuration string (URL-encoded) of the element."),
]
LinkDocumentId = Annotated[
    str | None,
    Field(description="Optional: The ID of the document through which the document is accessed, for linked documents."),
]
Transform = Annotated[
    list[float],
    Field(
        min_length=12,
        max_length=12,
        description=(
            "A 4x4 transformation matrix (12 numbers representing 3 rows, "
            "4 columns) as a flat array."
        ),
    ),
]


def make_address(
    document_id: str,
    state: str | None = None,
    state_id: str | None = None,
    element_id: str | None = None,
    part_id: str | None = None,
) -> Address:
    """Build and validate an Address from tool arguments.

    Raises:
        AddressError: If the arguments do not form a complete address.
    """
    selector = state_selector(state, state_id or "") if state is not None else None
    return Address(document_id, selector, element_id, part_id).validate()


def workspace_address(document_id: str, workspace_id: str, element_id: str) -> Address:
    """Address of an element in a workspace (the only mutable state)."""
    return make_address(document_id, "w", workspace_id, element_id)


def state_heading(state: StateSelector) -> str:
    """Short "W: <id>" style label for a state selector."""
    return f"{state.token.upper()}: {state.id}"


def format_notices(notices: list[Any], heading: str = "FeatureScript Notices:") -> str:
    """Render backend notices as a bullet list, or "" if there are none."""
    if not notices:
        return ""
    lines = [heading]
    lines += [f"- [{notice.level}] {notice.message}" for notice in notices]
    return "\n".join(lines) + "\n"


def format_mutation(result: MutationResult, verb: str) -> str:
    """Summarize a feature-list write.

    The mutation is reported as applied even when the feature evaluates to
    an error; warnings are appended after the new microversion.
    """
    text = f"New Microversion: {result.new_source_microversion}\n"
    if result.skew_detected:
        text += "Warning: Microversion skew detected.\n"
    if result.error_state is not None:
        text += f"Warning: The {verb} feature resulted in an error state.\n"
        error_message = result.error_state.get("errorMessage")
        if error_message:
            text += f"Error Message: {error_message}\n"
    text += format_notices(result.notices)
    return text


def format_bounding_box(bbox: Any) -> str:
    """Render a low/high corner bounding box response."""
    if isinstance(bbox, dict) and bbox.get("lowX") is not None:
        return (
            f"  Low Corner: [{bbox['lowX']}, {bbox.get('lowY')}, {bbox.get('lowZ')}]\n"
            f"  High Corner: [{bbox.get('highX')}, {bbox.get('highY')}, {bbox.get('highZ')}]\n"
            "(Coordinates in meters)"
        )
    return "Could not retrieve bounding box.\n"
