"""Price anomaly checking.

The aggregator only depends on the PriceAnomalyChecker contract, so a
valuation service can be plugged in instead of the regional heuristics below.
"""

import logging
from typing import Optional, Protocol

from landguard.models.schemas.fraud import CheckerResult, FraudSignalCreate, SignalType
from landguard.services.fraud.base import DetectionContext, SignalChecker

logger = logging.getLogger(__name__)

SEVERE_DROP_SCORE = 16
NOTABLE_DROP_SCORE = 10
REGIONAL_LOW_SCORE = 14
REGIONAL_HIGH_SCORE = 8
ABSOLUTE_LOW_SCORE = 12
ABSOLUTE_HIGH_SCORE = 8


class PriceAnomalyChecker(Protocol):
    async def check(
        self,
        listing_id: str,
        user_id: str,
        price: float,
        property_type: str,
        region: Optional[str] = None,
    ) -> CheckerResult: ...


class RegionalPriceAnomalyChecker(SignalChecker):
    """Flags price drops, regional outliers and implausible absolute prices."""

    name = "price"

    async def check(
        self,
        listing_id: str,
        user_id: str,
        price: float,
        property_type: str,
        region: Optional[str] = None,
    ) -> CheckerResult:
        return await self.run(
            DetectionContext(
                listing_id=listing_id,
                user_id=user_id,
                price=price,
                property_type=property_type,
                region=region,
            )
        )

    async def detect(self, context: DetectionContext) -> list[FraudSignalCreate]:
        if context.price is None or context.listing_id is None:
            raise ValueError("Price check requires a listing and a price")

        signals: list[FraudSignalCreate] = []
        signals.extend(await self._check_price_drop(context))
        if context.region and context.property_type:
            signals.extend(await self._check_regional(context))
        signals.extend(self._check_absolute(context))
        return signals

    async def _check_price_drop(self, context: DetectionContext) -> list[FraudSignalCreate]:
        s = self.settings
        price = context.price
        previous = await self.corpus.get_listing_price(context.listing_id)
        if not previous or previous == price:
            return []

        drop = (previous - price) / previous * 100
        if drop > s.price_drop_severe_percentage:
            score = SEVERE_DROP_SCORE
        elif drop > s.price_drop_notable_percentage:
            score = NOTABLE_DROP_SCORE
        else:
            return []

        logger.info(f"Price drop of {drop:.1f}% on listing {context.listing_id}")
        return [
            self._signal(
                context,
                SignalType.RAPID_PRICE_DROP,
                score,
                f"Price dropped by {drop:.1f}% from {previous:g} to {price:g}",
            )
        ]

    async def _check_regional(self, context: DetectionContext) -> list[FraudSignalCreate]:
        s = self.settings
        price = context.price
        prices = await self.corpus.fetch_comparable_prices(
            context.property_type,
            context.region,
            context.listing_id,
            s.regional_comparable_limit,
        )
        if len(prices) < s.regional_min_comparables:
            return []

        average = sum(prices) / len(prices)
        if average <= 0:
            logger.debug(f"No usable regional average for listing {context.listing_id}")
            return []

        deviation = (average - price) / average * 100
        logger.debug(
            f"Regional average {average:.0f}, price {price:g}, deviation {deviation:.1f}%"
        )

        if price < average * s.regional_low_ratio:
            return [
                self._signal(
                    context,
                    SignalType.PRICE_ANOMALY,
                    REGIONAL_LOW_SCORE,
                    f"Price {price:g} is {deviation:.1f}% below regional average of {average:.0f}",
                )
            ]
        if price > average * s.regional_high_ratio:
            return [
                self._signal(
                    context,
                    SignalType.PRICE_ANOMALY,
                    REGIONAL_HIGH_SCORE,
                    f"Price {price:g} is {abs(deviation):.1f}% above regional average of {average:.0f}",
                )
            ]
        return []

    def _check_absolute(self, context: DetectionContext) -> list[FraudSignalCreate]:
        s = self.settings
        price = context.price
        if price < s.absolute_min_price:
            return [
                self._signal(
                    context,
                    SignalType.PRICE_ANOMALY,
                    ABSOLUTE_LOW_SCORE,
                    f"Suspiciously low price: {price:g}",
                )
            ]
        if price > s.absolute_max_price:
            return [
                self._signal(
                    context,
                    SignalType.PRICE_ANOMALY,
                    ABSOLUTE_HIGH_SCORE,
                    f"Suspiciously high price: {price:g}",
                )
            ]
        return []
