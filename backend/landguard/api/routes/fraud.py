"""Fraud signal endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from landguard.api.deps import get_corpus, get_fraud_aggregator
from landguard.core.exceptions import InvalidGeoJSONError
from landguard.geometry.geojson import GeoJSONFormatError, parse_ring
from landguard.models.schemas.fraud import (
    FraudDetectionRequest,
    FraudDetectionSummary,
    SignalListResponse,
)
from landguard.repositories.corpus_repository import SqlParcelCorpus
from landguard.services.fraud import FraudSignalAggregator

router = APIRouter()


@router.post("/detect", response_model=FraudDetectionSummary)
async def detect_fraud(
    request: FraudDetectionRequest,
    aggregator: FraudSignalAggregator = Depends(get_fraud_aggregator),
) -> FraudDetectionSummary:
    """Run every fraud checker against a listing and record what they find."""
    try:
        ring, _ = parse_ring(request.geojson)
    except GeoJSONFormatError as e:
        raise InvalidGeoJSONError([str(e)])

    return await aggregator.run_full_detection(
        listing_id=request.listing_id,
        user_id=request.user_id,
        polygon=ring,
        price=request.price,
        property_type=request.property_type,
        region=request.region,
        phone=request.phone,
    )


@router.get("/signals", response_model=SignalListResponse)
async def list_signals(
    user_id: Optional[str] = Query(default=None),
    listing_id: Optional[str] = Query(default=None),
    corpus: SqlParcelCorpus = Depends(get_corpus),
) -> SignalListResponse:
    """List recorded signals, newest first."""
    signals = await corpus.list_signals(user_id=user_id, listing_id=listing_id)
    return SignalListResponse(
        signals=signals,
        count=len(signals),
        total_score=sum(s.signal_score for s in signals),
    )
