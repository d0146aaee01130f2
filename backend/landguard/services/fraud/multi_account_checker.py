"""Multi-account and account-behaviour checker."""

import logging
from datetime import datetime, timedelta, timezone

from landguard.models.schemas.fraud import FraudSignalCreate, SignalType
from landguard.services.fraud.base import DetectionContext, SignalChecker

logger = logging.getLogger(__name__)

SHARED_PHONE_SCORE = 15
RAPID_LISTING_SCORE = 10
REPEAT_OFFENDER_SCORE = 12


class MultiAccountChecker(SignalChecker):
    name = "multi_account"

    async def detect(self, context: DetectionContext) -> list[FraudSignalCreate]:
        s = self.settings
        signals: list[FraudSignalCreate] = []

        if context.phone:
            others = await self.corpus.find_profiles_by_phone(context.phone, context.user_id)
            if others:
                logger.info(f"Found {len(others)} other accounts sharing a phone number")
                signals.append(
                    self._signal(
                        context,
                        SignalType.MULTIPLE_ACCOUNTS_SAME_PHONE,
                        SHARED_PHONE_SCORE,
                        f"Phone number {context.phone} used by {len(others) + 1} different accounts",
                    )
                )

        since = datetime.now(timezone.utc) - timedelta(hours=s.rapid_listing_window_hours)
        recent = await self.corpus.fetch_user_listings_since(context.user_id, since)
        if len(recent) > s.rapid_listing_threshold:
            signals.append(
                self._signal(
                    context,
                    SignalType.RAPID_LISTING_CREATION,
                    RAPID_LISTING_SCORE,
                    (
                        f"Suspicious activity: {len(recent)} listings created in "
                        f"{s.rapid_listing_window_hours} hours"
                    ),
                )
            )

        prior = await self.corpus.count_user_signals(context.user_id)
        if prior >= s.repeat_offender_threshold:
            signals.append(
                self._signal(
                    context,
                    SignalType.REPEAT_OFFENDER,
                    REPEAT_OFFENDER_SCORE,
                    f"User has accumulated {prior} fraud signals",
                )
            )

        return signals
