"""
Unit tests for the dataset client.

Tests cover:
- Successful feature collection fetches
- Retry logic on 5xx errors
- No retry on 4xx errors
- Malformed documents
- Parallel load and join
- CSV passthrough
"""
import logging

import pytest
import httpx
import respx
from unittest.mock import AsyncMock

from concession_map.domain.models import Failed, Loaded
from concession_map.infrastructure.dataset_client import (
    DatasetClient,
    DatasetLoadError,
    get_dataset_client,
)

CONCESSIONS_PATH = "/Indonesia_oil_palm_concessions.geojson"
PONDS_PATH = "/telangana_ponds_final_cleaned.geojson"
CSV_PATH = "/Indonesia_oil_palm_concessions.csv"


# ============================================================
# Client Initialization Tests
# ============================================================

class TestClientInitialization:
    """Tests for dataset client initialization."""

    def test_client_initialization(self):
        """Client should initialize with the configured base URL."""
        client = DatasetClient()

        assert client.base_url == "http://datasets.test"
        assert client.client is not None

    def test_singleton_pattern(self):
        """get_dataset_client should return the same instance."""
        import concession_map.infrastructure.dataset_client as module
        module._dataset_client = None

        client1 = get_dataset_client()
        client2 = get_dataset_client()

        assert client1 is client2


# ============================================================
# Async Context Manager Tests
# ============================================================

class TestAsyncContextManager:
    """Tests for async context manager functionality."""

    @pytest.mark.asyncio
    async def test_context_manager_enter(self):
        """__aenter__ should return the client instance."""
        client = DatasetClient()

        async with client as ctx_client:
            assert ctx_client is client

    @pytest.mark.asyncio
    async def test_context_manager_exit_closes_client(self):
        """__aexit__ should close the HTTP client."""
        client = DatasetClient()
        client.close = AsyncMock()

        async with client:
            pass

        client.close.assert_called_once()


# ============================================================
# Feature Collection Tests
# ============================================================

class TestFetchFeatureCollection:
    """Tests for feature collection fetches."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_successful_fetch(self, concessions_collection):
        """Successful fetch should return the decoded collection."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, json=concessions_collection)
        )

        result = await client.fetch_feature_collection(CONCESSIONS_PATH)

        assert result == concessions_collection
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_not_a_feature_collection(self):
        """Documents without a features list should fail to load."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, json={"type": "Feature", "geometry": None})
        )

        with pytest.raises(DatasetLoadError, match="not a feature collection"):
            await client.fetch_feature_collection(CONCESSIONS_PATH)

        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self):
        """Non-JSON bodies should fail to load."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, text="<html>index</html>")
        )

        with pytest.raises(DatasetLoadError, match="not valid JSON"):
            await client.fetch_feature_collection(CONCESSIONS_PATH)

        await client.close()


# ============================================================
# Error Handling Tests
# ============================================================

class TestErrorHandling:
    """Tests for retry and error handling."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_4xx_error_no_retry(self):
        """4xx errors should not trigger retry."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        with pytest.raises(DatasetLoadError, match="404") as exc_info:
            await client.fetch_feature_collection(CONCESSIONS_PATH)

        assert exc_info.value.status_code == 404
        # Should only be called once (no retry)
        assert respx.calls.call_count == 1
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_5xx_error_triggers_retry(self, concessions_collection):
        """5xx errors should trigger retry."""
        client = DatasetClient()

        # First call fails with 500, second succeeds
        route = respx.get(f"{client.base_url}{CONCESSIONS_PATH}")
        route.side_effect = [
            httpx.Response(500, text="Internal Server Error"),
            httpx.Response(200, json=concessions_collection),
        ]

        result = await client.fetch_feature_collection(CONCESSIONS_PATH)

        assert result == concessions_collection
        assert respx.calls.call_count == 2  # Retried once
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_5xx_error_exhausts_retries(self):
        """Persistent 5xx errors should become a load error."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(503, text="Unavailable")
        )

        with pytest.raises(DatasetLoadError, match="503"):
            await client.fetch_feature_collection(CONCESSIONS_PATH)

        assert respx.calls.call_count == 3
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error(self):
        """Connection failures should become a load error."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(DatasetLoadError, match="connection refused"):
            await client.fetch_feature_collection(CONCESSIONS_PATH)

        await client.close()

    @pytest.mark.parametrize("status_code,body", [
        (404, "Not Found"),
        (503, "Unavailable"),
        (200, "not json"),
    ])
    @pytest.mark.asyncio
    @respx.mock
    async def test_error_names_dataset(self, status_code, body):
        """Load errors should carry the dataset they came from."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(status_code, text=body)
        )

        with pytest.raises(DatasetLoadError) as exc_info:
            await client.fetch_feature_collection(CONCESSIONS_PATH, dataset="concessions")

        assert exc_info.value.dataset == "concessions"
        await client.close()


# ============================================================
# Parallel Load Tests
# ============================================================

class TestLoadDatasets:
    """Tests for the joined two-dataset load."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_both_loaded(self, concessions_collection, ponds_collection):
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, json=concessions_collection)
        )
        respx.get(f"{client.base_url}{PONDS_PATH}").mock(
            return_value=httpx.Response(200, json=ponds_collection)
        )

        state = await client.load_datasets()

        assert state.status == "loaded"
        assert state.concessions == Loaded(data=concessions_collection)
        assert state.ponds == Loaded(data=ponds_collection)
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_one_failure_fails_join(self, concessions_collection):
        """A failed ponds fetch should fail the whole join."""
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, json=concessions_collection)
        )
        respx.get(f"{client.base_url}{PONDS_PATH}").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        state = await client.load_datasets()

        assert state.status == "failed"
        assert isinstance(state.concessions, Loaded)
        assert isinstance(state.ponds, Failed)
        assert "404" in state.failure_reasons()["ponds"]
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_failure_logged_with_dataset_name(self, concessions_collection, caplog):
        client = DatasetClient()
        respx.get(f"{client.base_url}{CONCESSIONS_PATH}").mock(
            return_value=httpx.Response(200, json=concessions_collection)
        )
        respx.get(f"{client.base_url}{PONDS_PATH}").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        with caplog.at_level(logging.ERROR):
            await client.load_datasets()

        assert "Failed to load ponds dataset" in caplog.text
        await client.close()


# ============================================================
# CSV Tests
# ============================================================

class TestFetchCsv:
    """Tests for the CSV passthrough."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_raw_bytes(self):
        client = DatasetClient()
        content = b"company,country,area_ha\nPT A,Indonesia,\xe2\x80\x94\n"
        respx.get(f"{client.base_url}{CSV_PATH}").mock(
            return_value=httpx.Response(200, content=content)
        )

        assert await client.fetch_csv() == content
        await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_failure_names_csv_dataset(self):
        client = DatasetClient()
        respx.get(f"{client.base_url}{CSV_PATH}").mock(
            return_value=httpx.Response(404, text="Not Found")
        )

        with pytest.raises(DatasetLoadError) as exc_info:
            await client.fetch_csv()

        assert exc_info.value.dataset == "concessions_csv"
        await client.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
