"""Pytest fixtures for boundary validation and fraud signal testing."""

from datetime import datetime
from typing import Any, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from landguard.config import Settings
from landguard.infrastructure.database import Base
from landguard.models.database import Listing, ListingPolygon, ListingStatus
from landguard.geometry.kernel import GeometryKernel
from landguard.geometry.types import CorpusParcel, Ring
from landguard.models.schemas.fraud import FraudSignalCreate, FraudSignalRead
from landguard.models.schemas.overlap import ListingState

# About 111 m at the equator
STEP = 0.001


def rect(min_lng: float, min_lat: float, max_lng: float, max_lat: float) -> dict:
    """Axis-aligned rectangle as a GeoJSON Polygon."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [min_lng, min_lat],
            [max_lng, min_lat],
            [max_lng, max_lat],
            [min_lng, max_lat],
            [min_lng, min_lat],
        ]],
    }


def ring_of(geojson: dict) -> Ring:
    return Ring.from_coordinates(geojson["coordinates"][0])


async def add_listing(
    session_factory,
    listing_id: str,
    status: ListingStatus = ListingStatus.PUBLISHED,
    geojson: Any = None,
    owner_id: str = "owner-1",
    **fields,
) -> None:
    """Insert a listing row, plus a first boundary version when given."""
    async with session_factory() as session:
        session.add(
            Listing(
                id=listing_id,
                owner_id=owner_id,
                title=f"Listing {listing_id}",
                status=status.value,
                **fields,
            )
        )
        if geojson is not None:
            session.add(ListingPolygon(listing_id=listing_id, version=1, geojson=geojson))
        await session.commit()


class InMemoryCorpus:
    """ParcelCorpus double holding everything in lists and dicts.

    Methods named in ``failing`` raise ConnectionError, and ``return_none``
    makes fetch_parcel_polygons answer None.
    """

    def __init__(self):
        self.parcels: list[tuple[CorpusParcel, bool]] = []
        self.signals: list[FraudSignalCreate] = []
        self.profiles: list[dict[str, Any]] = []
        self.listings: dict[str, dict[str, Any]] = {}
        self.saved_polygons: list[tuple[str, Any]] = []
        self.signal_counts: dict[str, int] = {}
        self.failing: set[str] = set()
        self.return_none = False
        self.fetch_calls = 0

    def add_parcel(
        self,
        listing_id: str,
        geojson: Any,
        title: Optional[str] = None,
        published: bool = True,
    ) -> None:
        self.parcels.append(
            (CorpusParcel(listing_id=listing_id, title=title or listing_id, geojson=geojson), published)
        )

    def add_listing(self, listing_id: str, **fields) -> None:
        self.listings[listing_id] = fields

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise ConnectionError(f"{name} unavailable")

    async def fetch_parcel_polygons(
        self,
        exclude_listing_id: Optional[str] = None,
        published_only: bool = True,
    ) -> Optional[list[CorpusParcel]]:
        self.fetch_calls += 1
        self._maybe_fail("fetch_parcel_polygons")
        if self.return_none:
            return None
        return [
            parcel
            for parcel, published in self.parcels
            if parcel.listing_id != exclude_listing_id and (published or not published_only)
        ]

    async def insert_signals(
        self,
        signals: list[FraudSignalCreate],
        skip_existing: bool = False,
    ) -> int:
        self._maybe_fail("insert_signals")
        self.signals.extend(signals)
        return len(signals)

    async def find_profiles_by_phone(self, phone: str, exclude_user_id: str) -> list[dict[str, Any]]:
        self._maybe_fail("find_profiles_by_phone")
        return [
            p for p in self.profiles if p["phone"] == phone and p["id"] != exclude_user_id
        ]

    async def fetch_user_listings_since(self, user_id: str, since: datetime) -> list[dict[str, Any]]:
        self._maybe_fail("fetch_user_listings_since")
        return [
            {"id": listing_id, "created_at": fields["created_at"]}
            for listing_id, fields in self.listings.items()
            if fields.get("owner_id") == user_id and fields.get("created_at", since) > since
        ]

    async def count_user_signals(self, user_id: str) -> int:
        self._maybe_fail("count_user_signals")
        return self.signal_counts.get(user_id, 0)

    async def get_listing_price(self, listing_id: str) -> Optional[float]:
        self._maybe_fail("get_listing_price")
        return self.listings.get(listing_id, {}).get("price")

    async def fetch_comparable_prices(
        self,
        property_type: str,
        region: str,
        exclude_listing_id: str,
        limit: int,
    ) -> list[float]:
        self._maybe_fail("fetch_comparable_prices")
        prices = [
            fields["price"]
            for listing_id, fields in self.listings.items()
            if listing_id != exclude_listing_id
            and fields.get("property_type") == property_type
            and fields.get("region") == region
            and fields.get("price") is not None
        ]
        return prices[:limit]

    async def get_boundary_state(self, listing_id: str) -> Optional[ListingState]:
        self._maybe_fail("get_boundary_state")
        if listing_id not in self.listings:
            return None
        return ListingState(self.listings[listing_id].get("boundary_state", "draft"))

    async def set_boundary_state(self, listing_id: str, state: ListingState) -> None:
        self._maybe_fail("set_boundary_state")
        self.listings[listing_id]["boundary_state"] = state.value

    async def save_polygon_version(self, listing_id: str, geojson: Any) -> int:
        self._maybe_fail("save_polygon_version")
        self.saved_polygons.append((listing_id, geojson))
        return sum(1 for saved_id, _ in self.saved_polygons if saved_id == listing_id)

    async def list_signals(
        self,
        user_id: Optional[str] = None,
        listing_id: Optional[str] = None,
    ) -> list[FraudSignalRead]:
        return []


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def kernel() -> GeometryKernel:
    return GeometryKernel()


@pytest.fixture
def corpus() -> InMemoryCorpus:
    return InMemoryCorpus()


@pytest.fixture
def square_geojson() -> dict:
    """Roughly 111 m x 111 m parcel on the equator."""
    return rect(0.0, 0.0, STEP, STEP)


@pytest.fixture
def square(square_geojson) -> Ring:
    return ring_of(square_geojson)


@pytest.fixture
def bowtie_geojson() -> dict:
    """Figure-eight ring whose first and third edges cross."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [0.0, 0.0],
            [STEP, STEP],
            [STEP, 0.0],
            [0.0, STEP],
            [0.0, 0.0],
        ]],
    }


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite file with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'landguard-test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
