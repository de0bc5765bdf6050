"""Tests for element inspection tools module."""

from unittest.mock import AsyncMock

import pytest

BBOX = {"lowX": 0.0, "lowY": 0.0, "lowZ": 0.0, "highX": 0.1, "highY": 0.2, "highZ": 0.3}


class TestElementTools:
    """Tests for bounding box and configuration tools."""

    @pytest.fixture
    def table(self, registry, mock_client):
        """Register element tools and return the frozen table."""
        from onshape_mcp.tools.elements import register_element_tools

        register_element_tools(registry, mock_client)
        return registry.freeze()

    @pytest.mark.asyncio
    async def test_part_bounding_box(self, table, mock_client):
        """Part bounding boxes use the parts endpoint."""
        mock_client.request = AsyncMock(return_value=BBOX)

        result = await table.call_tool(
            "get_part_bounding_box",
            {"documentId": "D1", "state": "v", "stateId": "V1", "elementId": "E1", "partId": "JHD"},
        )

        assert "Low Corner: [0.0, 0.0, 0.0]" in result.text
        assert "High Corner: [0.1, 0.2, 0.3]" in result.text
        assert mock_client.request.await_args.args == (
            "GET",
            "/parts/d/D1/v/V1/e/E1/partid/JHD/boundingboxes",
        )

    @pytest.mark.asyncio
    async def test_element_bounding_box_for_assembly(self, table, mock_client):
        """The endpoint should follow the element type."""
        mock_client.request = AsyncMock(
            side_effect=[{"elementType": "ASSEMBLY", "name": "Top"}, BBOX]
        )

        result = await table.call_tool(
            "get_element_bounding_box",
            {"documentId": "D1", "state": "w", "stateId": "W1", "elementId": "A1"},
        )

        assert 'Bounding Box for Element "Top" (ID: A1)' in result.text
        first, second = mock_client.request.await_args_list
        assert first.args == ("GET", "/documents/d/D1/w/W1/elements/A1")
        assert second.args == ("GET", "/assemblies/d/D1/w/W1/e/A1/boundingboxes")

    @pytest.mark.asyncio
    async def test_element_bounding_box_unsupported_type(self, table, mock_client):
        """Drawings and other element types have no bounding box."""
        mock_client.request = AsyncMock(
            return_value={"elementType": "DRAWING", "prettyType": "Drawing"}
        )

        result = await table.call_tool(
            "get_element_bounding_box",
            {"documentId": "D1", "state": "w", "stateId": "W1", "elementId": "X1"},
        )

        assert result.is_error is True
        assert "(Type: Drawing)" in result.text
        assert mock_client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_bounding_box(self, table, mock_client):
        """An empty response should be reported, not crash."""
        mock_client.request = AsyncMock(return_value={})

        result = await table.call_tool(
            "get_part_bounding_box",
            {"documentId": "D1", "state": "w", "stateId": "W1", "elementId": "E1", "partId": "JHD"},
        )

        assert "Could not retrieve bounding box." in result.text

    @pytest.mark.asyncio
    async def test_configuration_definition(self, table, mock_client):
        """Configuration parameters should be listed with their options."""
        mock_client.request = AsyncMock(
            return_value={
                "configurationParameters": [
                    {
                        "parameterName": "Size",
                        "parameterId": "List_1",
                        "parameterType": "BTMConfigurationParameterEnum-105",
                        "options": [{"optionName": "Small"}, {"optionName": "Large"}],
                    }
                ],
                "sourceMicroversion": "mv1",
            }
        )

        result = await table.call_tool(
            "get_element_configuration_definition",
            {"documentId": "D1", "state": "w", "stateId": "W1", "elementId": "E1"},
        )

        assert '- "Size" (ID: List_1' in result.text
        assert "Options: Small, Large" in result.text
        assert "Source Microversion: mv1" in result.text
        assert mock_client.request.await_args.args == (
            "GET",
            "/elements/d/D1/w/W1/e/E1/configuration",
        )

    @pytest.mark.asyncio
    async def test_no_configuration(self, table, mock_client):
        """Elements without parameters should say so."""
        mock_client.request = AsyncMock(return_value={"configurationParameters": []})

        result = await table.call_tool(
            "get_element_configuration_definition",
            {"documentId": "D1", "state": "m", "stateId": "M1", "elementId": "E1"},
        )

        assert "This element has no configuration parameters." in result.text
