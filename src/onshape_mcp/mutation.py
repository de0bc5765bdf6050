"""Version-stamped mutation of Part Studio feature lists.

Onshape keeps a per-document microversion counter and requires every
feature-list write to carry the serialization version, library version, and
source microversion from an immediately preceding read. This module
performs that read-modify-write sequence and interprets the write response:

1. Refuse anything but a workspace target (no network traffic).
2. Read the current feature list and capture its version stamps.
3. Refuse to write if any stamp is missing.
4. Embed the caller's feature, unmodified, together with the stamps.
5. Submit exactly one write and report the new microversion and notices.

A feature that evaluates to an error is still persisted by Onshape, so it
is reported as an applied mutation with a FeatureEvaluationWarning. Skew
reported by the backend is surfaced as a SkewWarning; nothing is retried.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from onshape_mcp.errors import AddressError, InvalidStateError, PreconditionError
from onshape_mcp.locator import Address, Workspace, quote_id

logger = logging.getLogger(__name__)

STAMP_FIELDS = ("serializationVersion", "libraryVersion", "sourceMicroversion")

Requester = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class Notice:
    """A FeatureScript notice returned alongside a write."""

    level: str
    message: str


@dataclass(frozen=True)
class SkewWarning:
    """The document changed between the read and the write."""

    message: str = "Microversion skew detected: the document changed since it was read."


@dataclass(frozen=True)
class FeatureEvaluationWarning:
    """The feature was saved but evaluates to an error."""

    message: str = "The feature was saved but evaluates to an error state."
    error_message: str | None = None


MutationWarning = SkewWarning | FeatureEvaluationWarning


@dataclass(frozen=True)
class FeatureListSnapshot:
    """Version stamps and features of a Part Studio at one microversion.

    Attributes:
        serialization_version: Feature serialization format version.
        library_version: FeatureScript library version.
        source_microversion: Microversion the feature list was read at.
        features: Features in list order.
    """

    serialization_version: str
    library_version: Any
    source_microversion: str
    features: tuple[dict[str, Any], ...] = ()

    @classmethod
    def from_response(cls, data: Any) -> "FeatureListSnapshot":
        """Build a snapshot from a GET .../features response.

        Raises:
            PreconditionError: If any version stamp is missing.
        """
        if not isinstance(data, dict):
            msg = "Failed to fetch necessary Part Studio metadata: empty feature list response"
            raise PreconditionError(msg)
        missing = [name for name in STAMP_FIELDS if data.get(name) in (None, "")]
        if missing:
            msg = (
                "Failed to fetch necessary Part Studio metadata; missing "
                + ", ".join(missing)
            )
            raise PreconditionError(msg)
        return cls(
            serialization_version=data["serializationVersion"],
            library_version=data["libraryVersion"],
            source_microversion=data["sourceMicroversion"],
            features=tuple(data.get("features") or ()),
        )

    def stamps(self) -> dict[str, Any]:
        """Version stamps in the shape the write endpoints expect."""
        return {
            "serializationVersion": self.serialization_version,
            "sourceMicroversion": self.source_microversion,
            "libraryVersion": self.library_version,
        }


@dataclass(frozen=True)
class MutationRequest:
    """A stamped write aimed at one Part Studio in a workspace.

    Attributes:
        target: Element address; its state is always a Workspace.
        payload: Caller's feature definition, passed through untouched.
        base_snapshot: Snapshot whose stamps accompany the write.
    """

    target: Address
    payload: dict[str, Any]
    base_snapshot: FeatureListSnapshot

    def body(self) -> dict[str, Any]:
        """Request body: the feature plus the snapshot's stamps."""
        return {"feature": self.payload, **self.base_snapshot.stamps()}


@dataclass
class MutationResult:
    """Outcome of a feature-list write.

    Attributes:
        new_source_microversion: Microversion after the write, if reported.
        skew_detected: Whether the backend reported microversion skew.
        notices: FeatureScript notices from the response.
        error_state: featureState block when the feature evaluates to an error.
        warnings: Informational warnings attached by interpretation.
        response: Raw response JSON.
    """

    new_source_microversion: str | None = None
    skew_detected: bool = False
    notices: list[Notice] = field(default_factory=list)
    error_state: dict[str, Any] | None = None
    warnings: list[MutationWarning] = field(default_factory=list)
    response: dict[str, Any] = field(default_factory=dict)


def require_workspace(address: Address) -> Workspace:
    """Return the address's workspace or refuse the mutation.

    Raises:
        InvalidStateError: If the address selects a version or microversion.
        AddressError: If the address is incomplete.
    """
    address.validate()
    state = address.state
    if not isinstance(state, Workspace):
        kind = state.label.lower() if state is not None else "document"
        msg = (
            f"Cannot modify a {kind}: versions and microversions are immutable. "
            "Use a workspace (w) instead."
        )
        raise InvalidStateError(msg)
    return state


def features_path(address: Address) -> str:
    """Feature list endpoint for a Part Studio element in a workspace."""
    workspace = require_workspace(address)
    if address.element_id is None:
        msg = "A Part Studio element ID is required"
        raise AddressError(msg)
    return (
        f"/partstudios/d/{quote_id(address.document_id)}/w/{quote_id(workspace.id)}"
        f"/e/{quote_id(address.element_id)}/features"
    )


def interpret_write_response(response: Any) -> MutationResult:
    """Extract microversion, notices, and warnings from a write response."""
    data = response if isinstance(response, dict) else {}
    result = MutationResult(
        new_source_microversion=data.get("sourceMicroversion"),
        skew_detected=bool(data.get("microversionSkew")),
        notices=[
            Notice(level=str(n.get("level", "INFO")), message=str(n.get("message", "")))
            for n in data.get("notices") or []
        ],
        response=data,
    )

    feature_state = data.get("featureState") or {}
    if feature_state.get("featureStatus") == "ERROR":
        result.error_state = feature_state
        result.warnings.append(
            FeatureEvaluationWarning(error_message=feature_state.get("errorMessage"))
        )
    if result.skew_detected:
        logger.warning(
            "Microversion skew reported; new microversion %s",
            result.new_source_microversion,
        )
        result.warnings.append(SkewWarning())
    return result


async def read_feature_list(request: Requester, address: Address) -> FeatureListSnapshot:
    """Read the current feature list of a workspace Part Studio."""
    data = await request("GET", features_path(address))
    return FeatureListSnapshot.from_response(data)


async def _stamped_write(
    request: Requester,
    address: Address,
    feature: dict[str, Any],
    write_path: str,
) -> MutationResult:
    snapshot = await read_feature_list(request, address)
    mutation = MutationRequest(target=address, payload=feature, base_snapshot=snapshot)
    logger.debug(
        "Writing feature to %s at microversion %s",
        write_path,
        snapshot.source_microversion,
    )
    response = await request("POST", write_path, mutation.body())
    return interpret_write_response(response)


async def add_feature(
    request: Requester, address: Address, feature: dict[str, Any]
) -> MutationResult:
    """Append a feature to a Part Studio.

    Args:
        request: Transport call, typically OnshapeClient.request.
        address: Element address in a workspace.
        feature: FeatureScript feature JSON (BTFeatureDefinitionCall.feature).

    Returns:
        MutationResult for the write.

    Raises:
        InvalidStateError: If the address is not a workspace (no request is made).
        PreconditionError: If the read lacks version stamps (no write is made).
    """
    return await _stamped_write(request, address, feature, features_path(address))


async def update_feature(
    request: Requester,
    address: Address,
    feature_id: str,
    feature: dict[str, Any],
) -> MutationResult:
    """Replace an existing feature in a Part Studio.

    Same guarantees as add_feature; the write targets the feature ID.
    """
    write_path = f"{features_path(address)}/featureid/{quote_id(feature_id)}"
    return await _stamped_write(request, address, feature, write_path)


async def delete_feature(
    request: Requester, address: Address, feature_id: str
) -> MutationResult:
    """Delete a feature from a Part Studio.

    The delete endpoint takes no body, so there is nothing to stamp; the
    workspace guard and response interpretation still apply.
    """
    write_path = f"{features_path(address)}/featureid/{quote_id(feature_id)}"
    response = await request("DELETE", write_path)
    return interpret_write_response(response)
