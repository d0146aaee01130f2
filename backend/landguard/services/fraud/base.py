"""Shared plumbing for fraud signal checkers."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from landguard.config import Settings
from landguard.geometry.types import Ring
from landguard.models.schemas.fraud import CheckerResult, FraudSignalCreate, SignalType
from landguard.repositories.corpus_repository import ParcelCorpus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionContext:
    """Inputs of one detection run, shared read-only by every checker."""

    listing_id: Optional[str]
    user_id: str
    polygon: Optional[Ring] = None
    price: Optional[float] = None
    property_type: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None


class SignalChecker(ABC):
    """A checker detects signals, then writes them in a single batch.

    Detection errors propagate to the caller. Persistence errors are logged
    and reported through ``CheckerResult.persisted``.
    """

    name: str = "checker"

    def __init__(self, corpus: ParcelCorpus, settings: Settings):
        self.corpus = corpus
        self.settings = settings

    @abstractmethod
    async def detect(self, context: DetectionContext) -> list[FraudSignalCreate]:
        """Return the signals raised for this context."""

    async def run(self, context: DetectionContext) -> CheckerResult:
        signals = await self.detect(context)
        persisted = await self._persist(signals)
        return CheckerResult(
            checker=self.name,
            success=True,
            signals_detected=len(signals),
            signals=signals,
            persisted=persisted,
        )

    async def _persist(self, signals: list[FraudSignalCreate]) -> bool:
        if not signals:
            return True
        skip_existing = self.settings.signal_dedup_policy == "skip_existing"
        try:
            inserted = await self.corpus.insert_signals(signals, skip_existing=skip_existing)
        except Exception:
            logger.exception(f"{self.name}: failed to persist {len(signals)} fraud signals")
            return False
        logger.info(f"{self.name}: inserted {inserted} of {len(signals)} fraud signals")
        return True

    @staticmethod
    def _signal(
        context: DetectionContext,
        signal_type: SignalType,
        score: int,
        details: str,
    ) -> FraudSignalCreate:
        return FraudSignalCreate(
            listing_id=context.listing_id,
            user_id=context.user_id,
            signal_type=signal_type,
            signal_score=score,
            details=details,
        )
