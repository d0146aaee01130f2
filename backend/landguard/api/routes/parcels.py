"""Parcel boundary validation and overlap endpoints."""

from fastapi import APIRouter, Depends

from landguard.api.deps import get_overlap_detector, get_validator
from landguard.core.exceptions import InvalidGeoJSONError
from landguard.geometry.geojson import GeoJSONFormatError, parse_ring
from landguard.geometry.validator import PolygonValidator
from landguard.models.schemas.overlap import OverlapCheckRequest, OverlapCheckResult
from landguard.models.schemas.validation import ValidateRequest, ValidationResult
from landguard.services.overlap_detector import OverlapDetector

router = APIRouter()


@router.post("/validate", response_model=ValidationResult)
async def validate_parcel(
    request: ValidateRequest,
    validator: PolygonValidator = Depends(get_validator),
) -> ValidationResult:
    """Validate a boundary. Defects are reported in the body, never as an HTTP error."""
    return validator.validate(request.geojson)


@router.post("/check-overlap", response_model=OverlapCheckResult)
async def check_overlap(
    request: OverlapCheckRequest,
    detector: OverlapDetector = Depends(get_overlap_detector),
) -> OverlapCheckResult:
    """Compare a boundary against the published parcels."""
    try:
        ring, _ = parse_ring(request.geojson)
    except GeoJSONFormatError as e:
        raise InvalidGeoJSONError([str(e)])

    return await detector.check_overlap(ring, exclude_parcel_id=request.exclude_listing_id)
