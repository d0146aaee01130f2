"""SQLAlchemy ORM models."""

from landguard.models.database.fraud_signal import FraudSignal
from landguard.models.database.listing import Listing, ListingPolygon, ListingStatus
from landguard.models.database.profile import Profile

__all__ = [
    "FraudSignal",
    "Listing",
    "ListingPolygon",
    "ListingStatus",
    "Profile",
]
