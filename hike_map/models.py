"""Data models for waypoints, day segments and the trip index."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final, Iterable, Sequence


@dataclass(frozen=True, slots=True)
class Waypoint:
    """A single timestamped location sample from the feed.

    Attributes:
        id: Vendor identifier of the sample. May be "" when the feed omits it.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        timestamp: Timezone-aware time the sample was recorded.
    """

    id: str
    latitude: float
    longitude: float
    timestamp: datetime

    @property
    def coordinates(self) -> list[float]:
        """[longitude, latitude], the order used in the output files."""

        return [self.longitude, self.latitude]


def by_timestamp(point: Waypoint) -> datetime:
    return point.timestamp


def sort_waypoints(points: Iterable[Waypoint]) -> list[Waypoint]:
    """Return points sorted by timestamp (stable: ties keep input order)."""

    return sorted(points, key=by_timestamp)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Outer points of a set of coordinates.

    Note:
        east < west is valid and means the box crosses the antimeridian.
    """

    north: float
    south: float
    east: float
    west: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.east < self.west

    def to_dict(self) -> dict[str, float]:
        return {"north": self.north, "south": self.south, "east": self.east, "west": self.west}


@dataclass(frozen=True, slots=True)
class DaySegment:
    """One day of the trip (or the "All" aggregate when index == 0)."""

    index: int
    name: str
    coordinates: tuple[tuple[float, float], ...]
    bounds: BoundingBox
    points: tuple[Waypoint, ...] = field(default=(), repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "name": self.name,
            "coordinates": [[lon, lat] for lon, lat in self.coordinates],
            "outerPoints": self.bounds.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class TripIndexEntry:
    """One row of index.json."""

    index: int
    id: str
    label: str
    sub_label: str
    details_location: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "id": self.id,
            "label": self.label,
            "subLabel": self.sub_label,
            "detailsLocation": self.details_location,
        }


@dataclass(frozen=True, slots=True)
class Trip:
    """Everything produced for one run: days in order, the aggregate, the index."""

    days: Sequence[DaySegment]
    aggregate: DaySegment
    index: Sequence[TripIndexEntry]


DEFAULT_TZ: Final[str] = "UTC"
DAY_KEY_FORMAT: Final[str] = "%m/%d/%Y"
