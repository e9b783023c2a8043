"""
Domain models for concession features and the values derived from them.

These models represent the core domain entities and should be independent
of any infrastructure concerns (HTTP clients, web frameworks, etc.).
Feature collections themselves stay as decoded GeoJSON mappings so that
malformed features can degrade instead of failing validation.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, Field

GeoFeature = Dict[str, Any]
GeoFeatureCollection = Dict[str, Any]

NOT_AVAILABLE = "N/A"


class Centroid(BaseModel):
    """Representative point of a polygon ring."""
    longitude: float = Field(description="Longitude rounded to 3 decimals")
    latitude: float = Field(description="Latitude rounded to 3 decimals")


class DisplayRecord(BaseModel):
    """Presentation-ready bundle for one selected feature."""
    longitude: float
    latitude: float
    area_ha: Union[float, str] = Field(
        description="Concession area in hectares, or 'N/A'"
    )
    company: str = NOT_AVAILABLE
    country: str = NOT_AVAILABLE


class SummaryStats(BaseModel):
    """Aggregate statistics over one feature collection."""
    total_fields: int = Field(ge=0, description="Number of features")
    total_area: float = Field(description="Summed area_ha rounded to 3 decimals")


# Load state per dataset

@dataclass(frozen=True)
class Pending:
    """Dataset fetch has not completed yet."""
    status: str = "pending"


@dataclass(frozen=True)
class Loaded:
    """Dataset fetched and decoded."""
    data: GeoFeatureCollection
    status: str = "loaded"


@dataclass(frozen=True)
class Failed:
    """Dataset fetch failed."""
    reason: str
    status: str = "failed"


DatasetState = Union[Pending, Loaded, Failed]


@dataclass(frozen=True)
class DatasetsState:
    """Join of the concession and pond dataset states."""
    concessions: DatasetState
    ponds: DatasetState

    @property
    def status(self) -> str:
        """
        Combined status of both datasets.

        Only 'loaded' when both datasets loaded; 'failed' as soon as
        either one failed.
        """
        states = (self.concessions, self.ponds)
        if any(isinstance(s, Failed) for s in states):
            return "failed"
        if all(isinstance(s, Loaded) for s in states):
            return "loaded"
        return "pending"

    @property
    def is_loaded(self) -> bool:
        return self.status == "loaded"

    def failure_reasons(self) -> dict[str, str]:
        reasons = {}
        if isinstance(self.concessions, Failed):
            reasons["concessions"] = self.concessions.reason
        if isinstance(self.ponds, Failed):
            reasons["ponds"] = self.ponds.reason
        return reasons


def initial_datasets_state() -> DatasetsState:
    return DatasetsState(concessions=Pending(), ponds=Pending())


def state_reason(state: DatasetState) -> Optional[str]:
    return state.reason if isinstance(state, Failed) else None
