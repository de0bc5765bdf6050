"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from onshape_mcp.registry import OperationRegistry


@pytest.fixture
def mock_client():
    """Mock Onshape client whose request() is an AsyncMock."""
    client = MagicMock()
    client.request = AsyncMock(return_value={})
    client.base_url = "https://cad.onshape.com/api/v1"
    return client


@pytest.fixture
def registry():
    """Fresh operation registry."""
    return OperationRegistry()


@pytest.fixture
def features_response():
    """Feature list response carrying all three version stamps."""
    return {
        "serializationVersion": "1.1.23",
        "libraryVersion": 2144,
        "sourceMicroversion": "mv-before",
        "features": [
            {
                "name": "Sketch 1",
                "featureId": "F1",
                "featureType": "newSketch",
                "suppressed": False,
            },
            {
                "name": "Extrude 1",
                "featureId": "F2",
                "featureType": "extrude",
                "suppressed": True,
            },
        ],
    }


@pytest.fixture
def write_response():
    """Successful feature write response."""
    return {
        "feature": {"name": "Extrude 2", "featureId": "F3"},
        "featureState": {"featureStatus": "OK"},
        "sourceMicroversion": "mv-after",
        "microversionSkew": False,
        "notices": [],
    }


@pytest.fixture
def sample_feature():
    """Minimal extrude feature definition."""
    return {
        "btType": "BTMFeature-134",
        "featureType": "extrude",
        "name": "Extrude 2",
        "parameters": [],
    }
