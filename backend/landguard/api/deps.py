"""Dependency injection for routes."""

from fastapi import Depends

from landguard.config import Settings, get_settings
from landguard.geometry.validator import PolygonValidator
from landguard.infrastructure.database import get_session_factory
from landguard.repositories.corpus_repository import SqlParcelCorpus
from landguard.services.decision_gateway import DecisionGateway, ListingBoundaryService
from landguard.services.fraud import FraudSignalAggregator
from landguard.services.overlap_detector import OverlapDetector


def get_corpus() -> SqlParcelCorpus:
    return SqlParcelCorpus(get_session_factory())


def get_validator(
    settings: Settings = Depends(get_settings),
) -> PolygonValidator:
    return PolygonValidator(settings)


def get_overlap_detector(
    corpus: SqlParcelCorpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings),
) -> OverlapDetector:
    return OverlapDetector(corpus, settings)


def get_decision_gateway(
    validator: PolygonValidator = Depends(get_validator),
    detector: OverlapDetector = Depends(get_overlap_detector),
) -> DecisionGateway:
    return DecisionGateway(validator, detector)


def get_boundary_service(
    gateway: DecisionGateway = Depends(get_decision_gateway),
    corpus: SqlParcelCorpus = Depends(get_corpus),
) -> ListingBoundaryService:
    return ListingBoundaryService(gateway, corpus)


def get_fraud_aggregator(
    corpus: SqlParcelCorpus = Depends(get_corpus),
    settings: Settings = Depends(get_settings),
) -> FraudSignalAggregator:
    return FraudSignalAggregator.from_corpus(corpus, settings)
