"""Overlap check and publish decision schemas."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from landguard.geometry.types import OverlapSeverity
from landguard.models.schemas.validation import ValidationResult


class OverlappingProperty(BaseModel):
    """One existing parcel sharing area with the candidate."""

    listing_id: str
    listing_title: str
    overlap_percentage: float = Field(ge=0, le=100)
    overlap_area_m2: float = Field(ge=0)
    severity: OverlapSeverity


class OverlapCheckResult(BaseModel):
    """Outcome of comparing a candidate against the accepted corpus."""

    can_proceed: bool
    has_overlaps: bool = False
    max_overlap_percentage: float = Field(default=0.0, ge=0, le=100)
    overlapping_properties: list[OverlappingProperty] = Field(default_factory=list)
    message: str


class OverlapCheckRequest(BaseModel):
    geojson: Any
    exclude_listing_id: Optional[str] = None


class ListingState(str, Enum):
    """Publication state of a listing boundary."""

    DRAFT = "draft"
    VALIDATING = "validating"
    BLOCKED = "blocked"
    ACCEPTED = "accepted"


class PublishDecision(BaseModel):
    """Allow/block verdict returned to the listing-creation workflow."""

    allow: bool
    reason: str
    state: ListingState
    validation: Optional[ValidationResult] = None
    overlap: Optional[OverlapCheckResult] = None


class BoundarySubmission(BaseModel):
    geojson: Any


class BoundarySubmissionResponse(BaseModel):
    decision: PublishDecision
    polygon_version: Optional[int] = None
