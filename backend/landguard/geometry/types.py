"""Type definitions for the geometry engine.

Contains the ring value type and enums shared by the validator, the overlap
detector and the fraud checkers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

Coordinate = tuple[float, float]


class OverlapSeverity(str, Enum):
    """Overlap bands, measured against the candidate's own area."""

    NEAR_DUPLICATE = "near_duplicate"
    SIGNIFICANT = "significant"
    MINOR = "minor"
    NEGLIGIBLE = "negligible"


@dataclass(frozen=True)
class Ring:
    """Closed sequence of (longitude, latitude) pairs in degrees.

    Rings are immutable. An accepted boundary is never edited in place; a
    correction produces a new ring and a new stored polygon version.
    """

    coordinates: tuple[Coordinate, ...]

    @classmethod
    def from_coordinates(cls, coordinates: Any) -> "Ring":
        return cls(tuple((float(p[0]), float(p[1])) for p in coordinates))

    @property
    def is_closed(self) -> bool:
        return len(self.coordinates) > 1 and self.coordinates[0] == self.coordinates[-1]

    @property
    def vertices(self) -> list[Coordinate]:
        """Distinct vertices, without the closing point."""
        if self.is_closed:
            return list(self.coordinates[:-1])
        return list(self.coordinates)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        lngs = [p[0] for p in self.coordinates]
        lats = [p[1] for p in self.coordinates]
        return (min(lngs), min(lats), max(lngs), max(lats))

    def closed(self) -> "Ring":
        """Return this ring with the closing point appended when missing."""
        if self.is_closed or not self.coordinates:
            return self
        return Ring(self.coordinates + (self.coordinates[0],))

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Polygon",
            "coordinates": [[list(p) for p in self.coordinates]],
        }


@dataclass(frozen=True)
class CorpusParcel:
    """An accepted parcel boundary read from the corpus store."""

    listing_id: str
    title: str
    geojson: Any
