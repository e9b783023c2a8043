"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample concession and pond feature collections
- Mock dataset client
- Loaded dashboard service
- FastAPI test client
"""
import asyncio
import os

# Settings are read at import time; keep retries fast and the host fixed
os.environ.setdefault("DATASET_BASE_URL", "http://datasets.test")
os.environ.setdefault("RETRY_MIN_WAIT", "0")
os.environ.setdefault("RETRY_MAX_WAIT", "0")

import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from concession_map.main import app
from concession_map.api.dependencies import get_dashboard_service
from concession_map.domain.models import DatasetsState, Failed, Loaded
from concession_map.infrastructure.dataset_client import DatasetClient, get_dataset_client
from concession_map.services.application.dashboard_service import DashboardService


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def square_ring() -> list[list[float]]:
    """Square ring whose vertex mean is (1, 1)."""
    return [[0, 0], [0, 2], [2, 2], [2, 0]]


@pytest.fixture
def concessions_collection(square_ring) -> dict:
    """Concessions with a mix of complete, partial and malformed features."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Polygon", "coordinates": [square_ring]},
                "properties": {
                    "area_ha": 10,
                    "company": "PT Sawit Makmur",
                    "country": "Indonesia",
                },
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": [[[110.0, -1.0], [110.5, -1.0], [110.5, -1.5], [110.0, -1.5]]],
                },
                "properties": {"area_ha": 5.5},
            },
            {
                "type": "Feature",
                "geometry": None,
                "properties": {"area_ha": "unknown", "company": "PT Tanpa Peta"},
            },
        ],
    }


@pytest.fixture
def ponds_collection() -> dict:
    """Pond points."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [78.4867, 17.385]},
                "properties": {"name": "Pond 1"},
            },
        ],
    }


# ============================================================
# Mock Dataset Client Fixtures
# ============================================================

@pytest.fixture
def mock_dataset_client(concessions_collection, ponds_collection):
    """Create a mock dataset client that loads both datasets."""
    mock_client = AsyncMock(spec=DatasetClient)
    mock_client.load_datasets.return_value = DatasetsState(
        concessions=Loaded(data=concessions_collection),
        ponds=Loaded(data=ponds_collection),
    )
    mock_client.fetch_csv.return_value = b"company,country,area_ha\nPT Sawit Makmur,Indonesia,10\n"
    return mock_client


@pytest.fixture
def failing_dataset_client(concessions_collection):
    """Create a mock dataset client whose ponds fetch fails."""
    mock_client = AsyncMock(spec=DatasetClient)
    mock_client.load_datasets.return_value = DatasetsState(
        concessions=Loaded(data=concessions_collection),
        ponds=Failed(reason="Request for /telangana_ponds_final_cleaned.geojson failed: 404 Not Found"),
    )
    return mock_client


@pytest.fixture
def loaded_service(mock_dataset_client) -> DashboardService:
    """Dashboard service with both datasets loaded."""
    service = DashboardService(dataset_client=mock_dataset_client)
    asyncio.run(service.load())
    return service


@pytest.fixture
def pending_service(mock_dataset_client) -> DashboardService:
    """Dashboard service that has not loaded yet."""
    return DashboardService(dataset_client=mock_dataset_client)


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(loaded_service, mock_dataset_client):
    """Create a test client backed by a loaded service and mock client."""
    app.dependency_overrides[get_dashboard_service] = lambda: loaded_service
    app.dependency_overrides[get_dataset_client] = lambda: mock_dataset_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def pending_test_client(pending_service):
    """Create a test client backed by a service that has not loaded."""
    app.dependency_overrides[get_dashboard_service] = lambda: pending_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
