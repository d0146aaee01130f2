"""Fraud signal aggregator.

Runs the polygon, multi-account and price checkers concurrently. Every
checker runs to completion; one failing contributes no signals but never
stops the others. This is the opposite of the overlap detector's policy:
signals feed a human review queue, they do not gate publication.
"""

import asyncio
import logging
from typing import Optional

from landguard.config import Settings
from landguard.geometry.types import Ring
from landguard.models.schemas.fraud import CheckerResult, FraudDetectionSummary
from landguard.repositories.corpus_repository import ParcelCorpus
from landguard.services.fraud.base import DetectionContext, SignalChecker
from landguard.services.fraud.multi_account_checker import MultiAccountChecker
from landguard.services.fraud.polygon_checker import PolygonFraudChecker
from landguard.services.fraud.price_checker import (
    PriceAnomalyChecker,
    RegionalPriceAnomalyChecker,
)

logger = logging.getLogger(__name__)


class FraudSignalAggregator:
    """Join-all-settled fan-out over the three checkers."""

    def __init__(
        self,
        polygon_checker: SignalChecker,
        multi_account_checker: SignalChecker,
        price_checker: PriceAnomalyChecker,
    ):
        self.polygon_checker = polygon_checker
        self.multi_account_checker = multi_account_checker
        self.price_checker = price_checker

    @classmethod
    def from_corpus(
        cls,
        corpus: ParcelCorpus,
        settings: Settings,
        price_checker: Optional[PriceAnomalyChecker] = None,
    ) -> "FraudSignalAggregator":
        return cls(
            polygon_checker=PolygonFraudChecker(corpus, settings),
            multi_account_checker=MultiAccountChecker(corpus, settings),
            price_checker=price_checker or RegionalPriceAnomalyChecker(corpus, settings),
        )

    async def run_full_detection(
        self,
        listing_id: str,
        user_id: str,
        polygon: Ring,
        price: float,
        property_type: str,
        region: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> FraudDetectionSummary:
        """Run every checker and summarise what they found.

        If the caller is cancelled, the checkers keep running and persist
        their signals; partial writes are expected in that case.
        """
        logger.info(f"Running full fraud detection for listing {listing_id}")

        context = DetectionContext(
            listing_id=listing_id,
            user_id=user_id,
            polygon=polygon,
            price=price,
            property_type=property_type,
            region=region,
            phone=phone,
        )

        tasks = [
            asyncio.ensure_future(self.polygon_checker.run(context)),
            asyncio.ensure_future(self.multi_account_checker.run(context)),
            asyncio.ensure_future(
                self.price_checker.check(listing_id, user_id, price, property_type, region)
            ),
        ]
        outcomes = await asyncio.shield(asyncio.gather(*tasks, return_exceptions=True))

        polygon_result, multi_result, price_result = (
            self._settle(name, outcome)
            for name, outcome in zip(("polygon", "multi_account", "price"), outcomes)
        )
        succeeded = [r for r in (polygon_result, multi_result, price_result) if r.success]

        summary = FraudDetectionSummary(
            polygon_check=polygon_result,
            multi_account_check=multi_result,
            price_check=price_result,
            total_signals=sum(r.signals_detected for r in succeeded),
            total_score=sum(r.total_score for r in succeeded),
        )
        logger.info(
            f"Fraud detection for listing {listing_id}: {summary.total_signals} signals, "
            f"score {summary.total_score}, {3 - len(succeeded)} checker(s) failed"
        )
        return summary

    @staticmethod
    def _settle(name: str, outcome) -> CheckerResult:
        if isinstance(outcome, BaseException):
            logger.error(f"{name} checker failed: {outcome!r}")
            return CheckerResult(
                checker=name,
                success=False,
                error=str(outcome) or type(outcome).__name__,
            )
        if not isinstance(outcome, CheckerResult):
            logger.error(f"{name} checker returned {type(outcome).__name__}, not a CheckerResult")
            return CheckerResult(
                checker=name,
                success=False,
                error=f"Checker returned {type(outcome).__name__} instead of a result",
            )
        return outcome
