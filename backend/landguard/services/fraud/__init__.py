"""Fraud signal detection: checkers and their aggregator."""

from landguard.services.fraud.aggregator import FraudSignalAggregator
from landguard.services.fraud.base import DetectionContext, SignalChecker
from landguard.services.fraud.multi_account_checker import MultiAccountChecker
from landguard.services.fraud.polygon_checker import PolygonFraudChecker
from landguard.services.fraud.price_checker import (
    PriceAnomalyChecker,
    RegionalPriceAnomalyChecker,
)

__all__ = [
    "DetectionContext",
    "FraudSignalAggregator",
    "MultiAccountChecker",
    "PolygonFraudChecker",
    "PriceAnomalyChecker",
    "RegionalPriceAnomalyChecker",
    "SignalChecker",
]
