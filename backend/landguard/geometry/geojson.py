"""GeoJSON boundary normalisation.

Listings arrive from map drawing tools as a bare Polygon, a Feature wrapping a
Polygon, or a FeatureCollection whose first feature is the boundary. All three
are reduced to the exterior ring.
"""

import json
import math
from typing import Any

from landguard.geometry.types import Ring


class GeoJSONFormatError(ValueError):
    """Raised when a submission cannot be read as a polygon boundary."""


def parse_ring(geojson: Any) -> tuple[Ring, list[str]]:
    """
    Extract the exterior ring from a GeoJSON submission.

    Returns:
        (ring, warnings) - warnings are non-fatal notes about ignored content

    Raises:
        GeoJSONFormatError: if the input is not a readable polygon
    """
    warnings: list[str] = []

    if isinstance(geojson, (str, bytes)):
        try:
            geojson = json.loads(geojson)
        except json.JSONDecodeError as e:
            raise GeoJSONFormatError(f"Invalid GeoJSON format: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise GeoJSONFormatError("Invalid GeoJSON format: input is not valid UTF-8") from e

    if not isinstance(geojson, dict):
        raise GeoJSONFormatError("Invalid GeoJSON format")

    geometry = geojson
    geo_type = geojson.get("type")

    if geo_type == "FeatureCollection":
        features = geojson.get("features")
        if not isinstance(features, list) or not features:
            raise GeoJSONFormatError("FeatureCollection contains no features")
        if len(features) > 1:
            warnings.append(
                f"FeatureCollection has {len(features)} features; only the first is used"
            )
        geometry = features[0]
        if isinstance(geometry, dict):
            geo_type = geometry.get("type")

    if geo_type == "Feature":
        geometry = geometry.get("geometry")
        if not isinstance(geometry, dict):
            raise GeoJSONFormatError("Feature has no geometry")
        geo_type = geometry.get("type")

    if geo_type != "Polygon":
        raise GeoJSONFormatError(f"Unsupported geometry type: {geo_type}")

    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, list) or not coordinates:
        raise GeoJSONFormatError("Missing or invalid coordinates array")

    exterior = coordinates[0]
    if not isinstance(exterior, list):
        raise GeoJSONFormatError("Polygon exterior ring must be an array of positions")

    if len(coordinates) > 1:
        warnings.append(
            f"Polygon has {len(coordinates) - 1} interior ring(s); holes are ignored"
        )

    return Ring(tuple(_parse_position(p, i) for i, p in enumerate(exterior))), warnings


def _parse_position(position: Any, index: int) -> tuple[float, float]:
    if not isinstance(position, (list, tuple)):
        raise GeoJSONFormatError(f"point[{index}] must be an array [lng, lat]")
    if len(position) < 2:
        raise GeoJSONFormatError(
            f"point[{index}] must have at least 2 coordinates, got {len(position)}"
        )

    lng, lat = position[0], position[1]
    if isinstance(lng, bool) or isinstance(lat, bool):
        raise GeoJSONFormatError(f"point[{index}] coordinates must be numbers")
    try:
        lng, lat = float(lng), float(lat)
    except (TypeError, ValueError, OverflowError) as e:
        raise GeoJSONFormatError(f"point[{index}] coordinates must be numbers: {e}") from e

    if not (math.isfinite(lng) and math.isfinite(lat)):
        raise GeoJSONFormatError(
            f"point[{index}] coordinates must be finite (not NaN or Infinity)"
        )
    if not -180 <= lng <= 180:
        raise GeoJSONFormatError(f"point[{index}] longitude {lng} out of range [-180, 180]")
    if not -90 <= lat <= 90:
        raise GeoJSONFormatError(f"point[{index}] latitude {lat} out of range [-90, 90]")

    return (lng, lat)
