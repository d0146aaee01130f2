"""Polygon validation request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class PolygonMetrics(BaseModel):
    """Informational measurements of a parseable ring."""

    area_m2: float
    perimeter_m: float
    num_vertices: int
    is_convex: bool
    centroid: tuple[float, float]


class ValidationResult(BaseModel):
    """Outcome of validating one boundary submission. Never cached."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    metrics: Optional[PolygonMetrics] = None


class ValidateRequest(BaseModel):
    """Request body carrying a raw GeoJSON boundary."""

    geojson: Any = Field(
        ...,
        description="GeoJSON Polygon, Feature<Polygon> or FeatureCollection",
    )
