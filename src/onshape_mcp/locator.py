"""Resource addressing for Onshape documents.

An Address names a document, optionally narrowed to one state of it
(workspace, version, or microversion), an element within that state, and
a part within that element. This module converts Addresses to and from
MCP resource URIs and to Onshape REST paths.

Resource URIs:
    - onshape://document/{documentId}
    - onshape://document/{documentId}/{state}/{stateId}
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId}
    - onshape://document/{documentId}/{state}/{stateId}/element/{elementId}/part/{partId}

where state is one of w (workspace), v (version), or m (microversion).
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar
from urllib.parse import quote, unquote

from onshape_mcp.errors import AddressError

SCHEME = "onshape"

_PREFIX = f"{SCHEME}://"
_DOCUMENT = "document"
_ELEMENT = "element"
_PART = "part"


@dataclass(frozen=True)
class Workspace:
    """Mutable workspace of a document."""

    id: str
    token: ClassVar[str] = "w"
    label: ClassVar[str] = "Workspace"


@dataclass(frozen=True)
class Version:
    """Immutable named version of a document."""

    id: str
    token: ClassVar[str] = "v"
    label: ClassVar[str] = "Version"


@dataclass(frozen=True)
class Microversion:
    """Immutable microversion (single edit) of a document."""

    id: str
    token: ClassVar[str] = "m"
    label: ClassVar[str] = "Microversion"


StateSelector = Workspace | Version | Microversion

_SELECTORS: dict[str, type[Workspace] | type[Version] | type[Microversion]] = {
    cls.token: cls for cls in (Workspace, Version, Microversion)
}
STATE_TOKENS = tuple(_SELECTORS)


def state_selector(token: str, state_id: str) -> StateSelector:
    """Build a state selector from its URI token.

    Args:
        token: One of "w", "v", or "m".
        state_id: Workspace, version, or microversion ID.

    Returns:
        The matching Workspace, Version, or Microversion.

    Raises:
        AddressError: If the token is unknown or the ID is empty.
    """
    try:
        cls = _SELECTORS[token]
    except KeyError:
        msg = f"Unknown state token {token!r}; expected one of w, v, m"
        raise AddressError(msg) from None
    if not state_id:
        msg = f"Missing {cls.label.lower()} ID"
        raise AddressError(msg)
    return cls(state_id)


class AddressLevel(str, Enum):
    """How deep an Address reaches into a document."""

    DOCUMENT = "document"
    STATE = "state"
    ELEMENT = "element"
    PART = "part"


@dataclass(frozen=True)
class Address:
    """Structured location of an Onshape document, state, element, or part.

    Construction is permissive; use validate() (called by every converter)
    to check structural completeness.

    Attributes:
        document_id: Document ID.
        state: Workspace, Version, or Microversion selector.
        element_id: Element (tab) ID. Requires state.
        part_id: Part ID. Requires element_id.
    """

    document_id: str
    state: StateSelector | None = None
    element_id: str | None = None
    part_id: str | None = None

    @property
    def level(self) -> AddressLevel:
        """The deepest component this address names."""
        if self.part_id is not None:
            return AddressLevel.PART
        if self.element_id is not None:
            return AddressLevel.ELEMENT
        if self.state is not None:
            return AddressLevel.STATE
        return AddressLevel.DOCUMENT

    def validate(self) -> "Address":
        """Check the address is structurally complete.

        Returns:
            The address itself, for chaining.

        Raises:
            AddressError: If a required component is missing.
        """
        if not self.document_id:
            msg = "Address is missing a document ID"
            raise AddressError(msg)
        if self.state is not None and not self.state.id:
            msg = f"Address is missing a {self.state.label.lower()} ID"
            raise AddressError(msg)
        if self.element_id is not None:
            if not self.element_id:
                msg = "Address has an empty element ID"
                raise AddressError(msg)
            if self.state is None:
                msg = "An element address requires a workspace, version, or microversion"
                raise AddressError(msg)
        if self.part_id is not None:
            if not self.part_id:
                msg = "Address has an empty part ID"
                raise AddressError(msg)
            if self.element_id is None:
                msg = "A part address requires an element ID"
                raise AddressError(msg)
        return self


def quote_id(value: str) -> str:
    """Percent-encode an ID for use as a single URI or REST path segment."""
    return quote(value, safe="")


def build_uri(address: Address) -> str:
    """Build the MCP resource URI for an address.

    Args:
        address: Address to convert.

    Returns:
        URI string such as "onshape://document/abc/w/def/element/ghi".

    Raises:
        AddressError: If the address is incomplete.
    """
    address.validate()
    segments = [_DOCUMENT, quote_id(address.document_id)]
    if address.state is not None:
        segments += [address.state.token, quote_id(address.state.id)]
    if address.element_id is not None:
        segments += [_ELEMENT, quote_id(address.element_id)]
    if address.part_id is not None:
        segments += [_PART, quote_id(address.part_id)]
    return _PREFIX + "/".join(segments)


def parse_uri(uri: str) -> Address:
    """Parse an MCP resource URI into an Address.

    Args:
        uri: URI matching one of the four onshape:// templates.

    Returns:
        The parsed, validated Address.

    Raises:
        AddressError: If the URI does not match any template.
    """
    if not uri.startswith(_PREFIX):
        msg = f"Not an {SCHEME}:// resource URI: {uri!r}"
        raise AddressError(msg)

    segments = uri[len(_PREFIX) :].split("/")
    if any(segment == "" for segment in segments):
        msg = f"Resource URI has an empty component: {uri!r}"
        raise AddressError(msg)
    if segments[0] != _DOCUMENT or len(segments) < 2:
        msg = f"Resource URI must start with {_PREFIX}{_DOCUMENT}/{{documentId}}: {uri!r}"
        raise AddressError(msg)
    if len(segments) not in (2, 4, 6, 8):
        msg = f"Resource URI has an unexpected number of components: {uri!r}"
        raise AddressError(msg)

    document_id = unquote(segments[1])
    state = None
    element_id = None
    part_id = None

    if len(segments) >= 4:
        state = state_selector(segments[2], unquote(segments[3]))
    if len(segments) >= 6:
        if segments[4] != _ELEMENT:
            msg = f"Expected '{_ELEMENT}' in resource URI, got {segments[4]!r}"
            raise AddressError(msg)
        element_id = unquote(segments[5])
    if len(segments) == 8:
        if segments[6] != _PART:
            msg = f"Expected '{_PART}' in resource URI, got {segments[6]!r}"
            raise AddressError(msg)
        part_id = unquote(segments[7])

    return Address(document_id, state, element_id, part_id).validate()


def state_path(address: Address) -> str:
    """REST path segment selecting a document state: /d/{did}/{w|v|m}/{id}.

    Raises:
        AddressError: If the address has no state selector.
    """
    address.validate()
    if address.state is None:
        msg = "A workspace, version, or microversion is required"
        raise AddressError(msg)
    return (
        f"/d/{quote_id(address.document_id)}"
        f"/{address.state.token}/{quote_id(address.state.id)}"
    )


def rest_path(address: Address) -> str:
    """Convert an address to its Onshape REST path.

    Element and part paths are identical in shape for all three state
    selectors; only the document-state path differs by selector kind.

    Args:
        address: Address to convert.

    Returns:
        REST path relative to the API base URL.

    Raises:
        AddressError: If the address is incomplete.
    """
    address.validate()
    level = address.level

    if level is AddressLevel.DOCUMENT:
        return f"/documents/{quote_id(address.document_id)}"

    if level is AddressLevel.STATE:
        state = address.state
        document_id = quote_id(address.document_id)
        state_id = quote_id(state.id)
        if isinstance(state, Workspace):
            return f"/documents/d/{document_id}/workspaces/{state_id}"
        if isinstance(state, Version):
            return f"/documents/d/{document_id}/versions/{state_id}"
        return f"/documents/d/{document_id}/m/{state_id}/currentmicroversion"

    path = f"{state_path(address)}/e/{quote_id(address.element_id)}"
    if level is AddressLevel.PART:
        path += f"/pi/{quote_id(address.part_id)}"
    return path


URI_TEMPLATES: dict[AddressLevel, str] = {
    AddressLevel.DOCUMENT: f"{_PREFIX}{_DOCUMENT}/{{documentId}}",
    AddressLevel.STATE: f"{_PREFIX}{_DOCUMENT}/{{documentId}}/{{state}}/{{stateId}}",
    AddressLevel.ELEMENT: (
        f"{_PREFIX}{_DOCUMENT}/{{documentId}}/{{state}}/{{stateId}}"
        f"/{_ELEMENT}/{{elementId}}"
    ),
    AddressLevel.PART: (
        f"{_PREFIX}{_DOCUMENT}/{{documentId}}/{{state}}/{{stateId}}"
        f"/{_ELEMENT}/{{elementId}}/{_PART}/{{partId}}"
    ),
}
