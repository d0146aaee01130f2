"""Parcel corpus repository.

The overlap detector and the fraud checkers never own parcel state; they read
it through a ParcelCorpus handed to them at construction time.
"""

from datetime import datetime
from typing import Any, Optional, Protocol

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from landguard.geometry.types import CorpusParcel
from landguard.models.database import FraudSignal, Listing, ListingPolygon, ListingStatus, Profile
from landguard.models.schemas.fraud import FraudSignalCreate, FraudSignalRead
from landguard.models.schemas.overlap import ListingState

HIDDEN_STATUSES = (ListingStatus.DRAFT.value, ListingStatus.ARCHIVED.value)


class ParcelCorpus(Protocol):
    """Queries the integrity engine needs from the listing store."""

    async def fetch_parcel_polygons(
        self,
        exclude_listing_id: Optional[str] = None,
        published_only: bool = True,
    ) -> Optional[list[CorpusParcel]]: ...

    async def insert_signals(
        self,
        signals: list[FraudSignalCreate],
        skip_existing: bool = False,
    ) -> int: ...

    async def find_profiles_by_phone(
        self, phone: str, exclude_user_id: str
    ) -> list[dict[str, Any]]: ...

    async def fetch_user_listings_since(
        self, user_id: str, since: datetime
    ) -> list[dict[str, Any]]: ...

    async def count_user_signals(self, user_id: str) -> int: ...

    async def get_listing_price(self, listing_id: str) -> Optional[float]: ...

    async def fetch_comparable_prices(
        self,
        property_type: str,
        region: str,
        exclude_listing_id: str,
        limit: int,
    ) -> list[float]: ...

    async def get_boundary_state(self, listing_id: str) -> Optional[ListingState]: ...

    async def set_boundary_state(self, listing_id: str, state: ListingState) -> None: ...

    async def save_polygon_version(self, listing_id: str, geojson: Any) -> int: ...

    async def list_signals(
        self,
        user_id: Optional[str] = None,
        listing_id: Optional[str] = None,
    ) -> list[FraudSignalRead]: ...


class SqlParcelCorpus:
    """ParcelCorpus backed by SQLAlchemy.

    Every call opens its own session so that concurrently running checkers
    never share one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def fetch_parcel_polygons(
        self,
        exclude_listing_id: Optional[str] = None,
        published_only: bool = True,
    ) -> list[CorpusParcel]:
        """Current boundary of every listing, optionally only visible ones."""
        query = (
            select(ListingPolygon.listing_id, ListingPolygon.geojson, Listing.title)
            .join(Listing, Listing.id == ListingPolygon.listing_id)
            .where(ListingPolygon.is_current.is_(True))
        )
        if published_only:
            query = query.where(Listing.status.not_in(HIDDEN_STATUSES))
        if exclude_listing_id:
            query = query.where(ListingPolygon.listing_id != exclude_listing_id)

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                CorpusParcel(listing_id=row.listing_id, title=row.title, geojson=row.geojson)
                for row in result
            ]

    async def insert_signals(
        self,
        signals: list[FraudSignalCreate],
        skip_existing: bool = False,
    ) -> int:
        """Insert one batch of signals. Returns the number of rows written."""
        if not signals:
            return 0

        async with self.session_factory() as session:
            rows = []
            seen: set[tuple] = set()
            for signal in signals:
                key = (signal.listing_id, signal.user_id, signal.signal_type.value, signal.details)
                if skip_existing:
                    if key in seen or await self._signal_exists(session, key):
                        continue
                    seen.add(key)
                rows.append(
                    FraudSignal(
                        listing_id=signal.listing_id,
                        user_id=signal.user_id,
                        signal_type=signal.signal_type.value,
                        signal_score=signal.signal_score,
                        details=signal.details,
                    )
                )

            session.add_all(rows)
            await session.commit()
            return len(rows)

    async def _signal_exists(self, session: AsyncSession, key: tuple) -> bool:
        listing_id, user_id, signal_type, details = key
        listing_clause = (
            FraudSignal.listing_id.is_(None)
            if listing_id is None
            else FraudSignal.listing_id == listing_id
        )
        result = await session.execute(
            select(FraudSignal.id)
            .where(
                and_(
                    listing_clause,
                    FraudSignal.user_id == user_id,
                    FraudSignal.signal_type == signal_type,
                    FraudSignal.details == details,
                )
            )
            .limit(1)
        )
        return result.first() is not None

    async def find_profiles_by_phone(
        self, phone: str, exclude_user_id: str
    ) -> list[dict[str, Any]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Profile.id, Profile.full_name).where(
                    Profile.phone == phone, Profile.id != exclude_user_id
                )
            )
            return [{"id": row.id, "full_name": row.full_name} for row in result]

    async def fetch_user_listings_since(
        self, user_id: str, since: datetime
    ) -> list[dict[str, Any]]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Listing.id, Listing.created_at)
                .where(Listing.owner_id == user_id, Listing.created_at > since)
                .order_by(Listing.created_at.desc())
            )
            return [{"id": row.id, "created_at": row.created_at} for row in result]

    async def count_user_signals(self, user_id: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.count(FraudSignal.id)).where(FraudSignal.user_id == user_id)
            )
            return int(result.scalar_one())

    async def get_listing_price(self, listing_id: str) -> Optional[float]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Listing.price).where(Listing.id == listing_id)
            )
            return result.scalar_one_or_none()

    async def fetch_comparable_prices(
        self,
        property_type: str,
        region: str,
        exclude_listing_id: str,
        limit: int,
    ) -> list[float]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Listing.price)
                .where(
                    Listing.property_type == property_type,
                    Listing.region == region,
                    Listing.price.is_not(None),
                    Listing.id != exclude_listing_id,
                    Listing.status == ListingStatus.PUBLISHED.value,
                )
                .limit(limit)
            )
            return [float(price) for price in result.scalars()]

    async def get_boundary_state(self, listing_id: str) -> Optional[ListingState]:
        """Boundary state of the listing, or None if there is no such listing."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Listing.boundary_state).where(Listing.id == listing_id)
            )
            state = result.scalar_one_or_none()
            return ListingState(state) if state is not None else None

    async def set_boundary_state(self, listing_id: str, state: ListingState) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(Listing)
                .where(Listing.id == listing_id)
                .values(boundary_state=state.value)
            )
            await session.commit()

    async def save_polygon_version(self, listing_id: str, geojson: Any) -> int:
        """Store an accepted boundary as the listing's newest version.

        Earlier versions are kept and only lose their ``is_current`` flag.
        Returns the new version number.
        """
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.max(ListingPolygon.version)).where(
                    ListingPolygon.listing_id == listing_id
                )
            )
            version = (result.scalar_one_or_none() or 0) + 1

            await session.execute(
                update(ListingPolygon)
                .where(ListingPolygon.listing_id == listing_id)
                .values(is_current=False)
            )
            session.add(
                ListingPolygon(
                    listing_id=listing_id,
                    version=version,
                    geojson=geojson,
                    is_current=True,
                )
            )
            await session.commit()
            return version

    async def list_signals(
        self,
        user_id: Optional[str] = None,
        listing_id: Optional[str] = None,
    ) -> list[FraudSignalRead]:
        query = select(FraudSignal).order_by(FraudSignal.created_at.desc())
        if user_id:
            query = query.where(FraudSignal.user_id == user_id)
        if listing_id:
            query = query.where(FraudSignal.listing_id == listing_id)

        async with self.session_factory() as session:
            result = await session.execute(query)
            return [
                FraudSignalRead(
                    id=row.id,
                    listing_id=row.listing_id,
                    user_id=row.user_id,
                    signal_type=row.signal_type,
                    signal_score=row.signal_score,
                    details=row.details,
                    created_at=row.created_at,
                )
                for row in result.scalars()
            ]
