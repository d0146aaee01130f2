"""Listing boundary submission endpoint."""

from fastapi import APIRouter, Depends

from landguard.api.deps import get_boundary_service
from landguard.models.schemas.overlap import BoundarySubmission, BoundarySubmissionResponse
from landguard.services.decision_gateway import ListingBoundaryService

router = APIRouter()


@router.post("/{listing_id}/boundary", response_model=BoundarySubmissionResponse)
async def submit_boundary(
    listing_id: str,
    submission: BoundarySubmission,
    boundary_service: ListingBoundaryService = Depends(get_boundary_service),
) -> BoundarySubmissionResponse:
    """Validate and overlap-check a boundary, storing it when accepted."""
    return await boundary_service.submit_boundary(listing_id, submission.geojson)
