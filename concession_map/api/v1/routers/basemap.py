"""
API router for base map endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Query

from concession_map.api.v1.models.responses import (
    InitialView,
    MapConfigResponse,
    MapLayer,
    MapLinkResponse,
)
from concession_map.config import settings
from concession_map.infrastructure.api_constants import ExternalMapEndpoints, MapDefaults
from concession_map.services.domain.geometry_summary import build_external_map_link


router = APIRouter(
    prefix="/map",
    tags=["map"],
)


@router.get(
    "/link",
    response_model=MapLinkResponse,
    summary="Get an external map link for a coordinate",
)
async def get_map_link(
    longitude: Annotated[float, Query(ge=-180, le=180)],
    latitude: Annotated[float, Query(ge=-90, le=90)],
) -> MapLinkResponse:
    return MapLinkResponse(url=build_external_map_link(longitude, latitude))


@router.get(
    "/config",
    response_model=MapConfigResponse,
    summary="Get base map and overlay configuration",
)
async def get_map_config() -> MapConfigResponse:
    """
    Base map style, initial camera and overlay layers for the front end.

    The style URL embeds the configured MapTiler key; without one the base
    map tiles will not load but the overlays still do.
    """
    return MapConfigResponse(
        style_url=ExternalMapEndpoints.get_style_url(settings.maptiler_key),
        initial_view=InitialView(
            longitude=MapDefaults.INITIAL_LONGITUDE,
            latitude=MapDefaults.INITIAL_LATITUDE,
            zoom=MapDefaults.INITIAL_ZOOM,
        ),
        source_id=MapDefaults.CONCESSIONS_SOURCE_ID,
        interactive_layer_ids=[MapDefaults.CONCESSIONS_FILL_LAYER_ID],
        layers=[
            MapLayer(
                id=MapDefaults.CONCESSIONS_FILL_LAYER_ID,
                type="fill",
                paint=MapDefaults.FILL_PAINT,
            ),
            MapLayer(
                id=MapDefaults.CONCESSIONS_LINE_LAYER_ID,
                type="line",
                paint=MapDefaults.LINE_PAINT,
            ),
        ],
    )
