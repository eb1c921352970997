"""Inspect a loaded feed without writing anything."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence

from hike_map.config import TripConfig
from hike_map.geo import compute_bounds
from hike_map.models import BoundingBox, Waypoint
from hike_map.partition import partition_by_day
from hike_map.timeutils import day_key_func


@dataclass(frozen=True, slots=True)
class DaySummary:
    key: str
    points: int
    first: datetime
    last: datetime
    bounds: BoundingBox


@dataclass(frozen=True, slots=True)
class InspectResult:
    """High-level feed inspection result."""

    points: int
    distinct_ids: int
    missing_ids: int
    duplicate_timestamps: int
    first: datetime | None
    last: datetime | None
    bounds: BoundingBox | None
    days: Sequence[DaySummary]

    def to_dict(self) -> dict[str, Any]:
        return {
            "points": self.points,
            "distinct_ids": self.distinct_ids,
            "missing_ids": self.missing_ids,
            "duplicate_timestamps": self.duplicate_timestamps,
            "first": self.first.isoformat() if self.first else None,
            "last": self.last.isoformat() if self.last else None,
            "bounds": self.bounds.to_dict() if self.bounds else None,
            "days": [
                {
                    "key": d.key,
                    "points": d.points,
                    "first": d.first.isoformat(),
                    "last": d.last.isoformat(),
                    "bounds": d.bounds.to_dict(),
                }
                for d in self.days
            ],
        }


def inspect_trip(points: Sequence[Waypoint], config: TripConfig | None = None) -> InspectResult:
    """Inspect already-loaded points."""

    if not points:
        return InspectResult(
            points=0,
            distinct_ids=0,
            missing_ids=0,
            duplicate_timestamps=0,
            first=None,
            last=None,
            bounds=None,
            days=(),
        )

    cfg = config or TripConfig()
    partition = partition_by_day(points, day_key_func(cfg.tz_name, cfg.day_format))

    times = sorted(p.timestamp for p in points)
    dupe = 0
    for i in range(1, len(times)):
        if times[i] == times[i - 1]:
            dupe += 1

    days = []
    for key in partition.day_keys:
        bucket = partition.buckets[key]
        days.append(
            DaySummary(
                key=key,
                points=len(bucket),
                first=bucket[0].timestamp,
                last=bucket[-1].timestamp,
                bounds=compute_bounds([p.coordinates for p in bucket]),
            )
        )

    ids = [p.id for p in points if p.id]
    return InspectResult(
        points=len(points),
        distinct_ids=len(set(ids)),
        missing_ids=len(points) - len(ids),
        duplicate_timestamps=dupe,
        first=times[0],
        last=times[-1],
        bounds=compute_bounds([p.coordinates for p in points]),
        days=days,
    )
