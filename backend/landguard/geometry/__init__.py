"""Geometry engine package for Landguard boundary checks.

Provides the geodesic geometry kernel, GeoJSON boundary parsing and the
polygon validator used before any corpus comparison.
"""

from landguard.geometry.types import CorpusParcel, OverlapSeverity, Ring
from landguard.geometry.kernel import GeometryKernel
from landguard.geometry.geojson import GeoJSONFormatError, parse_ring
from landguard.geometry.validator import PolygonValidator

__all__ = [
    "CorpusParcel",
    "OverlapSeverity",
    "Ring",
    "GeometryKernel",
    "GeoJSONFormatError",
    "parse_ring",
    "PolygonValidator",
]
