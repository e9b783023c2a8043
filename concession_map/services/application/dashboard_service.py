"""
Application service: Orchestration layer for the concession dashboard.
"""
import asyncio
import logging
from typing import Any, Optional

from concession_map.domain.models import (
    DatasetsState,
    DisplayRecord,
    GeoFeatureCollection,
    SummaryStats,
    initial_datasets_state,
)
from concession_map.infrastructure.dataset_client import DatasetClient
from concession_map.services.domain.geometry_summary import (
    CentroidMethod,
    bundle_feature_for_display,
    summarize,
)

logger = logging.getLogger(__name__)


class DatasetNotReadyError(Exception):
    """Data was requested before both datasets finished loading."""

    def __init__(self, state: DatasetsState):
        self.state = state
        if state.status == "failed":
            reasons = "; ".join(f"{name}: {reason}" for name, reason in state.failure_reasons().items())
            message = f"Datasets failed to load ({reasons})"
        else:
            message = "Datasets are still loading"
        super().__init__(message)
        self.message = message


class DashboardService:
    """
    Application service for the concession dashboard.

    Owns the joined dataset load state and the summary derived from it.
    Follows the application layer pattern - geometry logic stays in the
    domain functions, this class only coordinates loading and gating.
    """

    def __init__(
        self,
        dataset_client: DatasetClient,
        centroid_method: CentroidMethod = "vertex_mean",
    ):
        """
        Initialize the service with dependencies.

        Args:
            dataset_client: Client for fetching the static datasets
            centroid_method: Method used for display positions
        """
        self.dataset_client = dataset_client
        self.centroid_method = centroid_method
        self._state = initial_datasets_state()
        self._summary: Optional[SummaryStats] = None
        self._load_lock = asyncio.Lock()

    @property
    def state(self) -> DatasetsState:
        return self._state

    async def load(self) -> DatasetsState:
        """
        Fetch both datasets and replace the current state wholesale.

        Also serves as the retry path after a failed load. Concurrent
        calls are serialized.

        Returns:
            The new joined state
        """
        async with self._load_lock:
            logger.info("Loading concession and pond datasets")
            state = await self.dataset_client.load_datasets()

            summary = None
            if state.is_loaded:
                summary = summarize(state.concessions.data)
                logger.info(
                    f"Datasets loaded: {summary.total_fields} concessions, "
                    f"{summary.total_area} ha"
                )
            else:
                logger.error(f"Dataset load {state.status}: {state.failure_reasons()}")

            self._state = state
            self._summary = summary
            return state

    def _require_loaded(self) -> DatasetsState:
        if not self._state.is_loaded:
            raise DatasetNotReadyError(self._state)
        return self._state

    def concessions(self) -> GeoFeatureCollection:
        return self._require_loaded().concessions.data

    def ponds(self) -> GeoFeatureCollection:
        return self._require_loaded().ponds.data

    def summary(self) -> SummaryStats:
        """
        Get the concession summary.

        Raises:
            DatasetNotReadyError: If both datasets have not loaded
        """
        self._require_loaded()
        return self._summary

    def display_for(self, index: int) -> Optional[DisplayRecord]:
        """
        Get the display record for a loaded concession by position.

        Args:
            index: Position of the feature in the concessions collection

        Returns:
            DisplayRecord, or None when the feature has no usable position

        Raises:
            DatasetNotReadyError: If both datasets have not loaded
            IndexError: If the index is out of range
        """
        features = self.concessions()["features"]
        if index < 0 or index >= len(features):
            raise IndexError(f"Concession index {index} out of range (0-{len(features) - 1})")
        return self.display_for_feature(features[index])

    def display_for_feature(self, feature: Any) -> Optional[DisplayRecord]:
        """Bundle an arbitrary feature, e.g. one hit-tested by the map."""
        record = bundle_feature_for_display(feature, method=self.centroid_method)
        if record is None:
            logger.debug("Feature has no usable position, skipping display")
        return record
