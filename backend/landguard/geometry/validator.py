"""Polygon validator for listing boundary submissions.

Turns raw GeoJSON into a ValidationResult. Errors block publication, warnings
are surfaced to the seller, and metrics are returned whenever the ring could
be read so the correction UI can still show an area and centroid.
"""

import logging
import math
from typing import Any, Optional

from landguard.config import Settings
from landguard.geometry.geojson import GeoJSONFormatError, parse_ring
from landguard.geometry.kernel import GeometryKernel
from landguard.geometry.types import Ring
from landguard.models.schemas.validation import PolygonMetrics, ValidationResult

logger = logging.getLogger(__name__)


class PolygonValidator:
    """Validates a boundary without touching the corpus or any store."""

    def __init__(self, settings: Settings, kernel: Optional[GeometryKernel] = None):
        self.settings = settings
        self.kernel = kernel or GeometryKernel(settings.coordinate_tolerance_deg)

    def validate(self, geojson: Any) -> ValidationResult:
        """Validate a GeoJSON Polygon, Feature or FeatureCollection.

        Args:
            geojson: Raw submission, as a dict or a JSON string

        Returns:
            ValidationResult; ``is_valid`` is False whenever ``errors`` is non-empty
        """
        errors: list[str] = []
        warnings: list[str] = []

        try:
            ring, parse_warnings = parse_ring(geojson)
        except GeoJSONFormatError as e:
            errors.append(str(e))
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        warnings.extend(parse_warnings)
        metrics = None

        try:
            self._check_structure(ring, errors)
            if len(ring.vertices) >= 3:
                metrics = self._compute_metrics(ring)
                self._check_measurements(ring, metrics, errors, warnings)
        except Exception as e:
            logger.exception("Unexpected failure while validating polygon")
            errors.append(f"Validation error: {e}")

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            metrics=metrics,
        )

    def _check_structure(self, ring: Ring, errors: list[str]) -> None:
        coords = ring.coordinates

        if len(coords) < 4:
            errors.append(
                f"Polygon must have at least 4 points (3 vertices plus the closing point), got {len(coords)}"
            )

        if not ring.is_closed:
            errors.append("Polygon ring is not closed (first and last points differ)")

        repeated = [i for i in range(1, len(coords)) if coords[i] == coords[i - 1]]
        if repeated:
            errors.append(
                f"Polygon has a zero-length edge (point[{repeated[0]}] repeats the previous point)"
            )

        if self.kernel.self_intersects(ring):
            errors.append("Polygon has self-intersections (invalid geometry)")

    def _compute_metrics(self, ring: Ring) -> PolygonMetrics:
        return PolygonMetrics(
            area_m2=round(self.kernel.area(ring), 2),
            perimeter_m=round(self.kernel.perimeter(ring), 2),
            num_vertices=len(ring.vertices),
            is_convex=self.kernel.is_convex(ring),
            centroid=self.kernel.centroid(ring),
        )

    def _check_measurements(
        self,
        ring: Ring,
        metrics: PolygonMetrics,
        errors: list[str],
        warnings: list[str],
    ) -> None:
        s = self.settings
        area = metrics.area_m2

        if area < s.near_zero_area_m2:
            errors.append(f"Polygon area is zero or near zero ({area:.2f} m²)")
        elif area < s.min_parcel_area_m2:
            warnings.append(
                f"Polygon area is very small ({area:.2f} m², minimum parcel size {s.min_parcel_area_m2:g} m²)"
            )

        if area > s.max_parcel_area_m2:
            warnings.append(
                f"Polygon area is very large ({area / 1_000_000:.1f} km²). Please verify."
            )

        if metrics.num_vertices > s.max_vertices:
            warnings.append(
                f"Polygon has many vertices ({metrics.num_vertices} > {s.max_vertices}). Consider simplification."
            )

        if area >= s.near_zero_area_m2:
            ratio = self.kernel.aspect_ratio(ring)
            if ratio > s.max_aspect_ratio:
                shown = "unbounded" if math.isinf(ratio) else f"{ratio:.1f}:1"
                warnings.append(
                    f"Polygon has unusual elongation (aspect ratio {shown}). Please verify boundaries."
                )

        if s.service_region_bounds is not None:
            lng, lat = metrics.centroid
            if not self.kernel.contains_point(_bounds_ring(s.service_region_bounds), lng, lat):
                warnings.append("Polygon centroid is outside the service region")


def _bounds_ring(bounds: tuple[float, float, float, float]) -> Ring:
    min_lng, min_lat, max_lng, max_lat = bounds
    return Ring(
        (
            (min_lng, min_lat),
            (max_lng, min_lat),
            (max_lng, max_lat),
            (min_lng, max_lat),
            (min_lng, min_lat),
        )
    )
