"""
Domain service: geometry-to-summary pipeline.

Pure functions a presentation layer calls into:
- Centroid resolution for a polygon ring (vertex mean or area weighted)
- Display bundling for a selected feature
- Summary statistics over a feature collection
- External map links

Malformed geometry and missing attributes never raise here; they degrade
to None or to the 'N/A' / 0 sentinels.
"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Any, Literal, Mapping, Optional, Sequence, Union

import numpy as np
from shapely.geometry import Polygon

from concession_map.domain.models import (
    Centroid,
    DisplayRecord,
    GeoFeature,
    GeoFeatureCollection,
    NOT_AVAILABLE,
    SummaryStats,
)
from concession_map.infrastructure.api_constants import ExternalMapEndpoints

logger = logging.getLogger(__name__)

CentroidMethod = Literal["vertex_mean", "area_weighted"]

_THREE_PLACES = Decimal("0.001")

# Above this magnitude floats carry no 3-decimal precision to round
_ROUNDING_LIMIT = 1e15


def round3(value: float) -> float:
    """
    Round to 3 decimal places, half away from zero.

    Rounds the shortest decimal representation of the float, so 1.2345
    becomes 1.235 rather than following its binary expansion down.
    Non-finite and very large values are returned unchanged.
    """
    value = float(value)
    if not math.isfinite(value) or abs(value) >= _ROUNDING_LIMIT:
        return value
    return float(Decimal(repr(value)).quantize(_THREE_PLACES, rounding=ROUND_HALF_UP))


def is_finite_number(value: Any) -> bool:
    """True for finite real numbers; bools and numeric strings do not count."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond the float range
        return False


def _valid_pairs(ring: Any) -> list[tuple[float, float]]:
    if not isinstance(ring, (list, tuple)):
        return []

    pairs = []
    for pair in ring:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            continue
        longitude, latitude = pair[0], pair[1]
        if is_finite_number(longitude) and is_finite_number(latitude):
            pairs.append((float(longitude), float(latitude)))
    return pairs


def _vertex_mean(pairs: list[tuple[float, float]]) -> tuple[float, float]:
    points = np.array(pairs, dtype=float)
    with np.errstate(over="ignore"):
        mean = points.mean(axis=0)
        if not np.all(np.isfinite(mean)):
            # Sum overflowed; scale before summing
            mean = (points / len(points)).sum(axis=0)
    longitude, latitude = mean
    return float(longitude), float(latitude)


def _area_weighted(pairs: list[tuple[float, float]]) -> Optional[tuple[float, float]]:
    if len(pairs) < 3:
        return None
    polygon = Polygon(pairs)
    if polygon.is_empty or polygon.area == 0:
        return None
    centroid = polygon.centroid
    if not (math.isfinite(centroid.x) and math.isfinite(centroid.y)):
        return None
    return float(centroid.x), float(centroid.y)


def resolve_centroid(
    ring: Any,
    method: CentroidMethod = "vertex_mean",
) -> Optional[Centroid]:
    """
    Resolve the representative point of a polygon ring.

    Args:
        ring: Sequence of [longitude, latitude] pairs, possibly malformed
        method: 'vertex_mean' averages the valid vertices; 'area_weighted'
            uses the polygon centroid and falls back to the vertex mean for
            degenerate rings

    Returns:
        Centroid rounded to 3 decimals, or None when no vertex is valid
    """
    pairs = _valid_pairs(ring)
    if not pairs:
        return None

    position = None
    if method == "area_weighted":
        position = _area_weighted(pairs)
        if position is None:
            logger.debug("Degenerate ring, falling back to vertex mean")
    if position is None:
        position = _vertex_mean(pairs)

    longitude, latitude = position
    return Centroid(longitude=round3(longitude), latitude=round3(latitude))


def read_property(feature: Any, key: str, default: Any = NOT_AVAILABLE) -> Any:
    """
    Read a named property from a feature.

    Missing properties, a missing properties mapping and JSON null all
    yield the default.
    """
    if not isinstance(feature, Mapping):
        return default
    properties = feature.get("properties")
    if not isinstance(properties, Mapping):
        return default
    value = properties.get(key)
    return default if value is None else value


def read_numeric_property(
    feature: Any,
    key: str,
    default: Union[float, str] = 0.0,
) -> Union[float, str]:
    """Read a property that must be a finite number, else the default."""
    value = read_property(feature, key, default=None)
    if is_finite_number(value):
        return float(value)
    return default


def first_ring(geometry: Any) -> Any:
    """
    Pick the ring used for the display position of a geometry.

    Polygons (and untyped geometries) use their outer ring, multipolygons
    the outer ring of their first polygon, and points become a single
    vertex ring. Returns None when there is nothing to pick from.
    """
    if not isinstance(geometry, Mapping):
        return None
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or not coordinates:
        return None

    geometry_type = geometry.get("type")
    if geometry_type == "Point":
        return [coordinates]
    if geometry_type == "MultiPolygon":
        polygon = coordinates[0]
        if isinstance(polygon, (list, tuple)) and polygon:
            return polygon[0]
        return None
    return coordinates[0]


def bundle_feature_for_display(
    feature: Any,
    method: CentroidMethod = "vertex_mean",
) -> Optional[DisplayRecord]:
    """
    Build the display record for a hovered or clicked feature.

    Args:
        feature: GeoJSON feature mapping (geometry + properties)
        method: Centroid method passed to resolve_centroid

    Returns:
        DisplayRecord, or None when the feature has no usable position
    """
    if not isinstance(feature, Mapping):
        return None

    ring = first_ring(feature.get("geometry"))
    if ring is None:
        return None

    centroid = resolve_centroid(ring, method=method)
    if centroid is None:
        return None

    return DisplayRecord(
        longitude=centroid.longitude,
        latitude=centroid.latitude,
        area_ha=read_numeric_property(feature, "area_ha", default=NOT_AVAILABLE),
        company=str(read_property(feature, "company")),
        country=str(read_property(feature, "country")),
    )


def summarize(
    features: Union[Sequence[GeoFeature], GeoFeatureCollection],
) -> SummaryStats:
    """
    Summarize a loaded feature collection.

    Args:
        features: Sequence of features, or a FeatureCollection mapping

    Returns:
        SummaryStats with the feature count and the summed area_ha, where
        missing or non-numeric areas contribute 0
    """
    if isinstance(features, Mapping):
        features = features.get("features") or []

    areas = [read_numeric_property(feature, "area_ha", default=0.0) for feature in features]
    try:
        total = math.fsum(areas)
    except OverflowError:
        with np.errstate(over="ignore"):
            total = float(np.sum(areas))
    total_area = round3(total)

    logger.debug(f"Summarized {len(areas)} features, total area {total_area} ha")
    return SummaryStats(total_fields=len(areas), total_area=total_area)


def build_external_map_link(longitude: float, latitude: float) -> str:
    """
    Build a Google Maps link centred on a coordinate.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        URL string
    """
    return ExternalMapEndpoints.GOOGLE_MAPS_SEARCH.format(
        latitude=latitude,
        longitude=longitude,
    )
