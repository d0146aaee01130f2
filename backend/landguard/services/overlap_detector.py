"""Overlap detector guarding against duplicate parcel listings.

Compares a candidate boundary with every accepted parcel and blocks
publication when more than the blocking share of the candidate's own area is
already claimed. Any failure to verify is treated as a block.
"""

import logging
from typing import Optional

from landguard.config import Settings
from landguard.core.exceptions import CorpusUnavailableError
from landguard.geometry.geojson import parse_ring
from landguard.geometry.kernel import GeometryKernel
from landguard.geometry.types import OverlapSeverity, Ring
from landguard.models.schemas.overlap import OverlapCheckResult, OverlappingProperty
from landguard.repositories.corpus_repository import ParcelCorpus

logger = logging.getLogger(__name__)

# Percentages are compared at this many decimals so that float noise around
# a band edge (19.9999999997 vs 20.0) does not flip a decision.
PERCENT_DECIMALS = 6

UNAVAILABLE_MESSAGE = "Overlap verification is temporarily unavailable. Please try again."


def classify_overlap(percentage: float, settings: Settings) -> OverlapSeverity:
    """Map an overlap percentage onto its band. Band edges are exclusive."""
    if percentage > settings.near_duplicate_overlap_percentage:
        return OverlapSeverity.NEAR_DUPLICATE
    if percentage > settings.blocking_overlap_percentage:
        return OverlapSeverity.SIGNIFICANT
    if percentage > settings.minor_overlap_percentage:
        return OverlapSeverity.MINOR
    return OverlapSeverity.NEGLIGIBLE


def overlap_percentage(intersection_m2: float, candidate_m2: float) -> float:
    """Share of the candidate's area covered, clamped to [0, 100]."""
    if candidate_m2 <= 0:
        raise ValueError("Candidate polygon has no area")
    percentage = round(intersection_m2 / candidate_m2 * 100, PERCENT_DECIMALS)
    return min(100.0, max(0.0, percentage))


class OverlapDetector:
    """Blocking overlap check against the accepted parcel corpus."""

    def __init__(
        self,
        corpus: ParcelCorpus,
        settings: Settings,
        kernel: Optional[GeometryKernel] = None,
    ):
        self.corpus = corpus
        self.settings = settings
        self.kernel = kernel or GeometryKernel(settings.coordinate_tolerance_deg)

    async def check_overlap(
        self,
        candidate: Ring,
        exclude_parcel_id: Optional[str] = None,
    ) -> OverlapCheckResult:
        """Compare ``candidate`` with every accepted parcel.

        Args:
            candidate: Boundary being submitted
            exclude_parcel_id: Listing whose own prior version must be ignored

        Returns:
            OverlapCheckResult. Never raises; on any error ``can_proceed`` is False.
        """
        try:
            return await self._check(candidate, exclude_parcel_id)
        except Exception:
            logger.exception(
                f"Overlap check failed (exclude={exclude_parcel_id}); blocking publication"
            )
            return OverlapCheckResult(
                can_proceed=False,
                has_overlaps=False,
                max_overlap_percentage=0.0,
                overlapping_properties=[],
                message=UNAVAILABLE_MESSAGE,
            )

    async def _check(
        self,
        candidate: Ring,
        exclude_parcel_id: Optional[str],
    ) -> OverlapCheckResult:
        candidate_area = self.kernel.area(candidate)
        if candidate_area <= 0:
            raise ValueError("Candidate polygon has zero area")

        parcels = await self.corpus.fetch_parcel_polygons(
            exclude_listing_id=exclude_parcel_id,
            published_only=True,
        )
        if parcels is None:
            raise CorpusUnavailableError("Parcel corpus returned no data")

        logger.info(
            f"Checking overlap of {candidate_area:.2f} m² candidate against {len(parcels)} parcels"
        )

        overlaps: list[OverlappingProperty] = []
        for parcel in parcels:
            # A corpus geometry we cannot read is a comparison failure, not a skip
            existing, _ = parse_ring(parcel.geojson)
            if len(set(existing.vertices)) < 3:
                raise ValueError(f"Parcel {parcel.listing_id} has a degenerate boundary")

            if not self.kernel.bboxes_intersect(candidate, existing):
                continue

            shared = self.kernel.intersection_area(candidate, existing)
            if shared is None:
                continue

            percentage = overlap_percentage(shared, candidate_area)
            if percentage <= 0:
                continue

            logger.debug(f"Overlap with {parcel.listing_id}: {percentage:.2f}% ({shared:.2f} m²)")
            overlaps.append(
                OverlappingProperty(
                    listing_id=parcel.listing_id,
                    listing_title=parcel.title or "Unknown Property",
                    overlap_percentage=percentage,
                    overlap_area_m2=round(shared, 2),
                    severity=classify_overlap(percentage, self.settings),
                )
            )

        overlaps.sort(key=lambda o: o.overlap_percentage, reverse=True)
        max_overlap = overlaps[0].overlap_percentage if overlaps else 0.0
        can_proceed = max_overlap <= self.settings.blocking_overlap_percentage

        result = OverlapCheckResult(
            can_proceed=can_proceed,
            has_overlaps=bool(overlaps),
            max_overlap_percentage=max_overlap,
            overlapping_properties=overlaps,
            message=self._message(overlaps, max_overlap, can_proceed),
        )
        logger.info(
            f"Overlap check result: can_proceed={can_proceed}, max={max_overlap:.2f}%, matches={len(overlaps)}"
        )
        return result

    def _message(
        self,
        overlaps: list[OverlappingProperty],
        max_overlap: float,
        can_proceed: bool,
    ) -> str:
        limit = self.settings.blocking_overlap_percentage
        if not can_proceed:
            blocking = [
                o for o in overlaps if o.overlap_percentage > limit
            ]
            names = ", ".join(f'"{o.listing_title}"' for o in blocking)
            return (
                f"This property overlaps {max_overlap:.2f}% with existing listing(s) {names}. "
                f"Properties cannot overlap more than {limit:g}%."
            )
        if overlaps:
            return f"Warning: Minor overlap detected ({max_overlap:.1f}%) with existing properties."
        return "No overlaps detected."
