"""Fraud signal schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class SignalType(str, Enum):
    SELF_INTERSECTING_POLYGON = "self_intersecting_polygon"
    DUPLICATE_POLYGON = "duplicate_polygon"
    SIMILAR_POLYGON = "similar_polygon"
    MULTIPLE_ACCOUNTS_SAME_PHONE = "multiple_accounts_same_phone"
    RAPID_LISTING_CREATION = "rapid_listing_creation"
    REPEAT_OFFENDER = "repeat_offender"
    RAPID_PRICE_DROP = "rapid_price_drop"
    PRICE_ANOMALY = "price_anomaly"


class FraudSignalCreate(BaseModel):
    """A detected signal, before persistence."""

    listing_id: Optional[str] = None
    user_id: str
    signal_type: SignalType
    signal_score: int = Field(gt=0)
    details: str


class FraudSignalRead(FraudSignalCreate):
    """A persisted signal row."""

    id: str
    created_at: datetime


class CheckerResult(BaseModel):
    """Outcome of one checker within a detection run."""

    checker: str
    success: bool
    signals_detected: int = 0
    signals: list[FraudSignalCreate] = Field(default_factory=list)
    persisted: bool = False
    error: Optional[str] = None

    @property
    def total_score(self) -> int:
        return sum(signal.signal_score for signal in self.signals)


class FraudDetectionSummary(BaseModel):
    """Aggregated result of the three checkers.

    ``total_signals`` counts signals while ``total_score`` sums their severity
    weights; ranking by one or the other gives different orders.
    """

    polygon_check: CheckerResult
    multi_account_check: CheckerResult
    price_check: CheckerResult
    total_signals: int = 0
    total_score: int = 0


class FraudDetectionRequest(BaseModel):
    listing_id: str
    user_id: str
    geojson: Any
    price: float
    property_type: str
    region: Optional[str] = None
    phone: Optional[str] = None


class SignalListResponse(BaseModel):
    signals: list[FraudSignalRead]
    count: int
    total_score: int
