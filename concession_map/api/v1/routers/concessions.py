"""
API router for concession endpoints.
"""
from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, Path, Request, Response, status

from concession_map.api.dependencies import DashboardServiceDep, DatasetClientDep
from concession_map.api.rate_limit import limiter, UPSTREAM_RATE_LIMIT
from concession_map.api.v1.routers.datasets import NOT_READY_RESPONSE
from concession_map.domain.models import DisplayRecord, SummaryStats
from concession_map.infrastructure.api_constants import APIConstants


router = APIRouter(
    prefix="/concessions",
    tags=["concessions"],
)

NO_POSITION_RESPONSE = {
    204: {"description": "Feature has no usable position; nothing to display"},
}


@router.get(
    "/summary",
    response_model=SummaryStats,
    summary="Get concession summary statistics",
    description="""
    Total number of concessions and their summed area in hectares.

    Features with a missing or non-numeric `area_ha` contribute 0 to the
    total area. Only available once both datasets have loaded.
    """,
    responses={
        200: {
            "description": "Summary of the loaded concessions",
            "content": {
                "application/json": {
                    "example": {"total_fields": 1024, "total_area": 53120.125}
                }
            }
        },
        **NOT_READY_RESPONSE,
    }
)
async def get_summary(dashboard_service: DashboardServiceDep) -> SummaryStats:
    return dashboard_service.summary()


@router.get(
    "/export.csv",
    summary="Download the concessions CSV",
    response_class=Response,
    responses={
        200: {"content": {APIConstants.CONTENT_TYPE_CSV: {}}},
        429: {"description": "Rate limit exceeded"},
        502: {"description": "CSV could not be fetched from the dataset host"},
    },
)
@limiter.limit(UPSTREAM_RATE_LIMIT)
async def export_csv(
    request: Request,
    dataset_client: DatasetClientDep,
) -> Response:
    """
    Hand the upstream concessions CSV to the browser as a download.

    The bytes are passed through unparsed.
    """
    content = await dataset_client.fetch_csv()
    return Response(
        content=content,
        media_type=APIConstants.CONTENT_TYPE_CSV,
        headers={
            "Content-Disposition": f'attachment; filename="{APIConstants.CSV_DOWNLOAD_FILENAME}"',
        },
    )


@router.post(
    "/display",
    response_model=DisplayRecord,
    summary="Build a display record for a map feature",
    description="""
    Bundle a hovered or clicked GeoJSON feature into a popup record:
    its centroid plus `area_ha`, `company` and `country`, with missing
    attributes replaced by "N/A".
    """,
    responses=NO_POSITION_RESPONSE,
)
async def display_feature(
    feature: Annotated[dict[str, Any], Body(description="GeoJSON feature")],
    dashboard_service: DashboardServiceDep,
):
    record = dashboard_service.display_for_feature(feature)
    if record is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return record


@router.get(
    "/{index}/display",
    response_model=DisplayRecord,
    summary="Get the display record of a loaded concession",
    responses={
        **NO_POSITION_RESPONSE,
        404: {"description": "No concession at this index"},
        **NOT_READY_RESPONSE,
    },
)
async def display_concession(
    index: Annotated[int, Path(ge=0, description="Position in the concessions collection")],
    dashboard_service: DashboardServiceDep,
):
    try:
        record = dashboard_service.display_for(index)
    except IndexError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    if record is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return record
