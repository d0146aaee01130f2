"""Listing and boundary polygon tables."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from landguard.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ListingStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Listing(Base):
    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(String(36), index=True)
    title: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default=ListingStatus.DRAFT.value)
    # Outcome of the last boundary decision: draft, blocked or accepted
    boundary_state: Mapped[str] = mapped_column(String(20), default="draft")
    price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    property_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    polygons: Mapped[list["ListingPolygon"]] = relationship(back_populates="listing")


class ListingPolygon(Base):
    """One version of a listing's boundary. Rows are never edited after insert
    except for clearing ``is_current`` when a newer version is accepted."""

    __tablename__ = "listing_polygons"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    listing_id: Mapped[str] = mapped_column(ForeignKey("listings.id"), index=True)
    version: Mapped[int] = mapped_column(Integer, default=1)
    geojson: Mapped[Any] = mapped_column(JSON)
    is_current: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    listing: Mapped[Listing] = relationship(back_populates="polygons")
