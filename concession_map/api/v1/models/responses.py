"""
API response models using Pydantic.
"""
from typing import Any, Optional
from pydantic import BaseModel, Field

from concession_map.domain.models import DatasetState, DatasetsState, state_reason


class DatasetStatus(BaseModel):
    """Load status of a single dataset."""
    status: str = Field(description="pending, loaded or failed")
    reason: Optional[str] = Field(
        default=None,
        description="Failure reason when status is failed"
    )

    @classmethod
    def from_state(cls, state: DatasetState) -> "DatasetStatus":
        return cls(status=state.status, reason=state_reason(state))


class DatasetsStatusResponse(BaseModel):
    """Response model for the dataset status endpoint."""
    status: str = Field(
        description="Combined status; loaded only when both datasets loaded"
    )
    concessions: DatasetStatus
    ponds: DatasetStatus

    @classmethod
    def from_state(cls, state: DatasetsState) -> "DatasetsStatusResponse":
        return cls(
            status=state.status,
            concessions=DatasetStatus.from_state(state.concessions),
            ponds=DatasetStatus.from_state(state.ponds),
        )

    class Config:
        json_schema_extra = {
            "example": {
                "status": "failed",
                "concessions": {"status": "loaded", "reason": None},
                "ponds": {
                    "status": "failed",
                    "reason": "Request for /telangana_ponds_final_cleaned.geojson failed: 404 Not Found",
                },
            }
        }


class MapLinkResponse(BaseModel):
    """External map link for a coordinate."""
    url: str = Field(
        description="Google Maps URL",
        examples=["https://www.google.com/maps?q=-2.549,117.99"]
    )


class InitialView(BaseModel):
    longitude: float
    latitude: float
    zoom: float


class MapLayer(BaseModel):
    id: str
    type: str
    paint: dict[str, Any]


class MapConfigResponse(BaseModel):
    """Base map and overlay configuration for the dashboard front end."""
    style_url: str = Field(description="Base map style document URL")
    initial_view: InitialView
    source_id: str = Field(description="Source id for the concessions overlay")
    interactive_layer_ids: list[str]
    layers: list[MapLayer]
