"""
Infrastructure layer: static dataset client with retry logic.

Fetches the concession and pond feature collections (and the concession
CSV) from the static dataset host.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from concession_map.config import settings
from concession_map.domain.models import (
    DatasetState,
    DatasetsState,
    Failed,
    GeoFeatureCollection,
    Loaded,
)
from concession_map.infrastructure.api_constants import DatasetNames

logger = logging.getLogger(__name__)


class DatasetLoadError(Exception):
    """A dataset could not be fetched or decoded."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        dataset: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.dataset = dataset


class DatasetClient:
    """
    Client for the static dataset host.
    Implements retry logic with exponential backoff for 5xx and
    transport errors; 4xx responses fail immediately.
    """

    def __init__(self):
        """Initialize the client with configuration."""
        self.base_url = settings.dataset_base_url
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.request_timeout,
        )

    async def __aenter__(self) -> "DatasetClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _request(self, path: str, dataset: Optional[str] = None) -> httpx.Response:
        """
        GET a path, retrying server and transport errors.

        Raises:
            httpx.HTTPStatusError: 5xx after the last attempt
            httpx.RequestError: Transport failure after the last attempt
            DatasetLoadError: 4xx response (not retried)
        """
        response = await self.client.get(path)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            raise DatasetLoadError(
                f"Request for {path} failed: {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
                dataset=dataset,
            )
        return response

    async def _get(self, path: str, dataset: Optional[str] = None) -> httpx.Response:
        try:
            return await self._request(path, dataset=dataset)
        except httpx.HTTPStatusError as e:
            raise DatasetLoadError(
                f"Request for {path} failed: {e.response.status_code} {e.response.reason_phrase}",
                status_code=502,
                dataset=dataset,
            )
        except httpx.RequestError as e:
            raise DatasetLoadError(
                f"Request for {path} failed: {str(e) or type(e).__name__}",
                dataset=dataset,
            )

    async def fetch_feature_collection(
        self,
        path: str,
        dataset: Optional[str] = None,
    ) -> GeoFeatureCollection:
        """
        Fetch and decode a GeoJSON feature collection.

        Args:
            path: Dataset path relative to the base URL
            dataset: Dataset name attached to load errors

        Returns:
            Decoded feature collection mapping

        Raises:
            DatasetLoadError: If the fetch fails or the document has no
                features list
        """
        response = await self._get(path, dataset=dataset)
        try:
            document: Any = response.json()
        except ValueError:
            raise DatasetLoadError(f"Dataset {path} is not valid JSON", dataset=dataset)

        if not isinstance(document, dict) or not isinstance(document.get("features"), list):
            raise DatasetLoadError(f"Dataset {path} is not a feature collection", dataset=dataset)

        logger.info(f"Fetched {len(document['features'])} features from {path}")
        return document

    async def fetch_csv(self) -> bytes:
        """
        Fetch the concessions CSV as raw bytes.

        Returns:
            CSV content, unparsed

        Raises:
            DatasetLoadError: If the fetch fails
        """
        response = await self._get(settings.concessions_csv_path, dataset=DatasetNames.CONCESSIONS_CSV)
        return response.content

    async def _load_one(self, name: str, path: str) -> DatasetState:
        try:
            return Loaded(data=await self.fetch_feature_collection(path, dataset=name))
        except DatasetLoadError as e:
            logger.error(f"Failed to load {e.dataset} dataset: {e.message}")
            return Failed(reason=e.message)

    async def load_datasets(self) -> DatasetsState:
        """
        Fetch both feature collections in parallel and join the results.

        Returns:
            DatasetsState; loaded only when both fetches succeeded
        """
        concessions, ponds = await asyncio.gather(
            self._load_one(DatasetNames.CONCESSIONS, settings.concessions_path),
            self._load_one(DatasetNames.PONDS, settings.ponds_path),
        )
        return DatasetsState(concessions=concessions, ponds=ponds)


# Singleton instance
_dataset_client: Optional[DatasetClient] = None


def get_dataset_client() -> DatasetClient:
    """
    Get or create the singleton dataset client instance.

    Returns:
        DatasetClient instance
    """
    global _dataset_client
    if _dataset_client is None:
        _dataset_client = DatasetClient()
    return _dataset_client
