"""Polygon fraud checker.

Unlike the overlap detector, which makes one allow/block decision, this
checker records a signal for every suspicious corpus match so reviewers can
see the full picture.
"""

import logging
from typing import Optional

from landguard.config import Settings
from landguard.core.exceptions import CorpusUnavailableError
from landguard.geometry.geojson import parse_ring
from landguard.geometry.kernel import GeometryKernel
from landguard.geometry.types import OverlapSeverity
from landguard.models.schemas.fraud import FraudSignalCreate, SignalType
from landguard.repositories.corpus_repository import ParcelCorpus
from landguard.services.fraud.base import DetectionContext, SignalChecker
from landguard.services.overlap_detector import classify_overlap, overlap_percentage

logger = logging.getLogger(__name__)

SELF_INTERSECTION_SCORE = 15
DUPLICATE_SCORE = 20
OVERLAP_SCORES = {
    OverlapSeverity.NEAR_DUPLICATE: 18,
    OverlapSeverity.SIGNIFICANT: 12,
    OverlapSeverity.MINOR: 5,
}


class PolygonFraudChecker(SignalChecker):
    name = "polygon"

    def __init__(
        self,
        corpus: ParcelCorpus,
        settings: Settings,
        kernel: Optional[GeometryKernel] = None,
    ):
        super().__init__(corpus, settings)
        self.kernel = kernel or GeometryKernel(settings.coordinate_tolerance_deg)

    async def detect(self, context: DetectionContext) -> list[FraudSignalCreate]:
        polygon = context.polygon
        if polygon is None:
            raise ValueError("Polygon fraud check requires a polygon")

        signals: list[FraudSignalCreate] = []

        if self.kernel.self_intersects(polygon):
            logger.info(f"Self-intersecting polygon on listing {context.listing_id}")
            signals.append(
                self._signal(
                    context,
                    SignalType.SELF_INTERSECTING_POLYGON,
                    SELF_INTERSECTION_SCORE,
                    "Polygon intersects itself - invalid geometry",
                )
            )

        parcels = await self.corpus.fetch_parcel_polygons(
            exclude_listing_id=context.listing_id,
            published_only=False,
        )
        if parcels is None:
            raise CorpusUnavailableError("Parcel corpus returned no data")

        candidate_area = self.kernel.area(polygon)

        for parcel in parcels:
            try:
                existing, _ = parse_ring(parcel.geojson)

                if self.kernel.equals(polygon, existing):
                    logger.info(f"Exact duplicate of listing {parcel.listing_id}")
                    signals.append(
                        self._signal(
                            context,
                            SignalType.DUPLICATE_POLYGON,
                            DUPLICATE_SCORE,
                            f"Exact duplicate of listing {parcel.listing_id}",
                        )
                    )
                    continue

                if candidate_area <= 0 or not self.kernel.bboxes_intersect(polygon, existing):
                    continue

                shared = self.kernel.intersection_area(polygon, existing)
                if shared is None:
                    continue

                percentage = overlap_percentage(shared, candidate_area)
                score = OVERLAP_SCORES.get(classify_overlap(percentage, self.settings))
                if score is None:
                    continue

                signals.append(
                    self._signal(
                        context,
                        SignalType.SIMILAR_POLYGON,
                        score,
                        f"{percentage:.1f}% overlap with listing {parcel.listing_id}",
                    )
                )
            except Exception as e:
                logger.warning(f"Skipping parcel {parcel.listing_id} in polygon fraud check: {e}")

        return signals
