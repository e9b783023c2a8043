"""
API router for dataset endpoints.
"""
from typing import Any

from fastapi import APIRouter, Request

from concession_map.api.dependencies import DashboardServiceDep
from concession_map.api.rate_limit import limiter, UPSTREAM_RATE_LIMIT
from concession_map.api.v1.models.responses import DatasetsStatusResponse


router = APIRouter(
    prefix="/datasets",
    tags=["datasets"],
)

NOT_READY_RESPONSE = {
    503: {"description": "Datasets are still loading or failed to load"},
}


@router.get(
    "/status",
    response_model=DatasetsStatusResponse,
    summary="Get dataset load status",
)
async def get_status(dashboard_service: DashboardServiceDep) -> DatasetsStatusResponse:
    """
    Report whether each dataset is pending, loaded or failed.

    The combined status is only 'loaded' once both the concessions and
    ponds datasets have loaded.
    """
    return DatasetsStatusResponse.from_state(dashboard_service.state)


@router.post(
    "/reload",
    response_model=DatasetsStatusResponse,
    summary="Reload both datasets",
    responses={
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(UPSTREAM_RATE_LIMIT)
async def reload_datasets(
    request: Request,
    dashboard_service: DashboardServiceDep,
) -> DatasetsStatusResponse:
    """
    Fetch both datasets again, replacing the current ones.

    This is the retry path after a failed load.
    """
    state = await dashboard_service.load()
    return DatasetsStatusResponse.from_state(state)


@router.get(
    "/concessions",
    summary="Get the concessions feature collection",
    responses=NOT_READY_RESPONSE,
)
async def get_concessions(dashboard_service: DashboardServiceDep) -> dict[str, Any]:
    return dashboard_service.concessions()


@router.get(
    "/ponds",
    summary="Get the ponds feature collection",
    responses=NOT_READY_RESPONSE,
)
async def get_ponds(dashboard_service: DashboardServiceDep) -> dict[str, Any]:
    return dashboard_service.ponds()
