"""Publish decision gateway.

Sequences validation and the overlap check into a single allow/block verdict
for the listing-creation workflow:

    draft -> validating -> blocked | accepted
    blocked | accepted -> validating  (resubmission or boundary edit)

Only decision outcomes are stored on the listing; validating lasts for the
duration of a single can_publish call.
"""

import logging
from typing import Any

from landguard.core.exceptions import ListingNotFoundError
from landguard.geometry.geojson import parse_ring
from landguard.geometry.validator import PolygonValidator
from landguard.models.schemas.overlap import (
    BoundarySubmissionResponse,
    ListingState,
    PublishDecision,
)
from landguard.repositories.corpus_repository import ParcelCorpus
from landguard.services.overlap_detector import OverlapDetector

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ListingState, frozenset[ListingState]] = {
    ListingState.DRAFT: frozenset({ListingState.VALIDATING}),
    ListingState.VALIDATING: frozenset({ListingState.BLOCKED, ListingState.ACCEPTED}),
    ListingState.BLOCKED: frozenset({ListingState.VALIDATING}),
    ListingState.ACCEPTED: frozenset({ListingState.VALIDATING}),
}

UNEXPECTED_ERROR_REASON = "Boundary could not be verified. Please try again."
IN_PROGRESS_REASON = "Boundary is already being validated. Please wait for the current check to finish."


def can_transition(current: ListingState, target: ListingState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


class DecisionGateway:
    """Single entry point deciding whether a boundary may be published."""

    def __init__(self, validator: PolygonValidator, detector: OverlapDetector):
        self.validator = validator
        self.detector = detector

    async def can_publish(
        self,
        listing_id: str,
        raw_geojson: Any,
        current_state: ListingState = ListingState.DRAFT,
    ) -> PublishDecision:
        """Validate the boundary, then check it against the accepted corpus.

        An invalid polygon is blocked before the corpus is consulted. The
        listing's own current boundary is excluded so that resubmitting an
        unchanged polygon is not flagged as an overlap with itself.

        A listing whose state cannot move to validating is refused without
        running any check, and keeps its current state.
        """
        if not can_transition(current_state, ListingState.VALIDATING):
            logger.info(f"Listing {listing_id} is {current_state.value}; refusing a new check")
            return PublishDecision(allow=False, reason=IN_PROGRESS_REASON, state=current_state)

        state = ListingState.VALIDATING
        logger.info(
            f"Evaluating boundary for listing {listing_id} ({current_state.value} -> {state.value})"
        )

        try:
            validation = self.validator.validate(raw_geojson)
            if not validation.is_valid:
                logger.info(
                    f"Listing {listing_id} blocked by validation: {validation.errors[0]}"
                )
                return self._decide(
                    state,
                    allow=False,
                    reason=validation.errors[0],
                    validation=validation,
                )

            ring, _ = parse_ring(raw_geojson)
            overlap = await self.detector.check_overlap(ring, exclude_parcel_id=listing_id)
            if not overlap.can_proceed:
                logger.info(f"Listing {listing_id} blocked by overlap check")
                return self._decide(
                    state,
                    allow=False,
                    reason=overlap.message,
                    validation=validation,
                    overlap=overlap,
                )

            return self._decide(
                state,
                allow=True,
                reason=overlap.message,
                validation=validation,
                overlap=overlap,
            )
        except Exception:
            logger.exception(f"Unexpected failure deciding listing {listing_id}; blocking")
            return self._decide(state, allow=False, reason=UNEXPECTED_ERROR_REASON)

    @staticmethod
    def _decide(current: ListingState, allow: bool, reason: str, **results) -> PublishDecision:
        target = ListingState.ACCEPTED if allow else ListingState.BLOCKED
        logger.debug(f"Listing transition {current.value} -> {target.value}")
        return PublishDecision(allow=allow, reason=reason, state=target, **results)


class ListingBoundaryService:
    """Runs the gateway for an existing listing and records the outcome.

    Accepted boundaries are stored as a new polygon version. The decision's
    state is written back to the listing either way.
    """

    def __init__(self, gateway: DecisionGateway, corpus: ParcelCorpus):
        self.gateway = gateway
        self.corpus = corpus

    async def submit_boundary(
        self, listing_id: str, raw_geojson: Any
    ) -> BoundarySubmissionResponse:
        """Raises ListingNotFoundError if the listing does not exist."""
        current_state = await self.corpus.get_boundary_state(listing_id)
        if current_state is None:
            raise ListingNotFoundError(listing_id)

        decision = await self.gateway.can_publish(listing_id, raw_geojson, current_state)
        version = None
        if decision.allow:
            version = await self.corpus.save_polygon_version(listing_id, raw_geojson)
            logger.info(f"Stored boundary version {version} for listing {listing_id}")

        if decision.state != current_state:
            await self.corpus.set_boundary_state(listing_id, decision.state)
        return BoundarySubmissionResponse(decision=decision, polygon_version=version)
