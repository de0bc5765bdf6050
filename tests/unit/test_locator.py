"""Tests for resource addressing."""

import pytest

from onshape_mcp.errors import AddressError
from onshape_mcp.locator import (
    URI_TEMPLATES,
    Address,
    AddressLevel,
    Microversion,
    Version,
    Workspace,
    build_uri,
    parse_uri,
    rest_path,
    state_path,
    state_selector,
)


class TestStateSelector:
    """Tests for state_selector."""

    @pytest.mark.parametrize(
        ("token", "cls"),
        [("w", Workspace), ("v", Version), ("m", Microversion)],
    )
    def test_known_tokens(self, token, cls):
        """Each token should map to its selector type."""
        selector = state_selector(token, "S1")

        assert isinstance(selector, cls)
        assert selector.id == "S1"
        assert selector.token == token

    def test_unknown_token_raises(self):
        """An unknown token should be rejected."""
        with pytest.raises(AddressError, match="Unknown state token"):
            state_selector("x", "S1")

    def test_empty_id_raises(self):
        """A selector needs a non-empty ID."""
        with pytest.raises(AddressError):
            state_selector("v", "")


class TestAddress:
    """Tests for Address levels and validation."""

    def test_levels(self):
        """Level should be the deepest component present."""
        assert Address("D").level is AddressLevel.DOCUMENT
        assert Address("D", Workspace("W")).level is AddressLevel.STATE
        assert Address("D", Workspace("W"), "E").level is AddressLevel.ELEMENT
        assert Address("D", Workspace("W"), "E", "P").level is AddressLevel.PART

    def test_element_without_state_is_invalid(self):
        """An element address must carry a state selector."""
        with pytest.raises(AddressError, match="requires a workspace"):
            Address("D", element_id="E").validate()

    def test_part_without_element_is_invalid(self):
        """A part address must carry an element ID."""
        with pytest.raises(AddressError, match="requires an element"):
            Address("D", Workspace("W"), part_id="P").validate()

    def test_empty_document_is_invalid(self):
        """A document ID is always required."""
        with pytest.raises(AddressError):
            Address("").validate()

    def test_addresses_are_values(self):
        """Equal components should give equal addresses."""
        assert Address("D", Version("V"), "E") == Address("D", Version("V"), "E")
        assert Address("D", Version("V")) != Address("D", Microversion("V"))


class TestUris:
    """Tests for build_uri and parse_uri."""

    @pytest.mark.parametrize(
        "address",
        [
            Address("D1"),
            Address("D1", Workspace("W1")),
            Address("D1", Version("V1"), "E1"),
            Address("D1", Microversion("M1"), "E1", "JHD"),
        ],
    )
    def test_round_trip(self, address):
        """Parsing a built URI should give back the same address."""
        assert parse_uri(build_uri(address)) == address

    def test_build_uri_shapes(self):
        """URIs should follow the documented templates."""
        assert build_uri(Address("D1")) == "onshape://document/D1"
        assert (
            build_uri(Address("D1", Workspace("W1"), "E1", "P1"))
            == "onshape://document/D1/w/W1/element/E1/part/P1"
        )

    def test_ids_are_percent_encoded(self):
        """IDs containing reserved characters should survive a round trip."""
        address = Address("D1", Workspace("W1"), "E1", "JH/D")
        uri = build_uri(address)

        assert uri.endswith("/part/JH%2FD")
        assert parse_uri(uri) == address

    def test_build_uri_rejects_incomplete_address(self):
        """Building a URI should validate first."""
        with pytest.raises(AddressError):
            build_uri(Address("D1", part_id="P1"))

    @pytest.mark.parametrize(
        "uri",
        [
            "http://document/D1",
            "onshape://folder/D1",
            "onshape://document",
            "onshape://document/",
            "onshape://document/D1/w",
            "onshape://document/D1/x/W1",
            "onshape://document/D1/w/W1/elem/E1",
            "onshape://document/D1/w/W1/element/E1/body/P1",
            "onshape://document/D1/w/W1/element/E1/part/P1/extra",
            "onshape://document//w/W1",
        ],
    )
    def test_parse_uri_rejects_malformed(self, uri):
        """Malformed URIs should raise AddressError."""
        with pytest.raises(AddressError):
            parse_uri(uri)

    def test_templates_cover_every_level(self):
        """There should be one URI template per address level."""
        assert set(URI_TEMPLATES) == set(AddressLevel)
        assert URI_TEMPLATES[AddressLevel.STATE] == (
            "onshape://document/{documentId}/{state}/{stateId}"
        )


class TestRestPaths:
    """Tests for rest_path and state_path."""

    def test_document(self):
        """Document addresses map to the document endpoint."""
        assert rest_path(Address("D1")) == "/documents/D1"

    def test_states(self):
        """Each selector kind has its own document-state endpoint."""
        assert rest_path(Address("D1", Workspace("W1"))) == "/documents/d/D1/workspaces/W1"
        assert rest_path(Address("D1", Version("V1"))) == "/documents/d/D1/versions/V1"
        assert (
            rest_path(Address("D1", Microversion("M1")))
            == "/documents/d/D1/m/M1/currentmicroversion"
        )

    @pytest.mark.parametrize(
        ("state", "token"),
        [(Workspace("S1"), "w"), (Version("S1"), "v"), (Microversion("S1"), "m")],
    )
    def test_element_and_part_paths(self, state, token):
        """Element and part paths share one shape across selectors."""
        assert rest_path(Address("D1", state, "E1")) == f"/d/D1/{token}/S1/e/E1"
        assert rest_path(Address("D1", state, "E1", "P1")) == f"/d/D1/{token}/S1/e/E1/pi/P1"

    def test_state_path_requires_state(self):
        """state_path needs a selector."""
        with pytest.raises(AddressError):
            state_path(Address("D1"))

    def test_rest_path_encodes_ids(self):
        """IDs with reserved characters should stay single path segments."""
        address = parse_uri("onshape://document/D1/w/W1/element/a%2Fb/part/p%20q")

        assert address.element_id == "a/b"
        assert rest_path(address) == "/d/D1/w/W1/e/a%2Fb/pi/p%20q"

    def test_state_paths_encode_ids(self):
        """Document and state IDs should be encoded in every REST path shape."""
        assert rest_path(Address("D/1")) == "/documents/D%2F1"
        assert rest_path(Address("D1", Version("V/1"))) == "/documents/d/D1/versions/V%2F1"
        assert state_path(Address("D1", Microversion("M/1"))) == "/d/D1/m/M%2F1"
