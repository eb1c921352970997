"""Build day records, the "All" aggregate and the index from a partition."""

from __future__ import annotations

import uuid
from typing import Callable, Sequence

from hike_map.config import TripConfig
from hike_map.geo import compute_bounds
from hike_map.models import DaySegment, Trip, TripIndexEntry, Waypoint
from hike_map.partition import DayPartition


def new_entry_id() -> str:
    """Fresh random identifier for an index entry. Meaningless beyond uniqueness."""

    return str(uuid.uuid4())


def day_from_points(name: str, index: int, points: Sequence[Waypoint]) -> DaySegment:
    """Build a DaySegment from a day's points (coordinates keep point order)."""

    coords = tuple((p.longitude, p.latitude) for p in points)
    return DaySegment(
        index=index,
        name=name,
        coordinates=coords,
        bounds=compute_bounds(coords),
        points=tuple(points),
    )


def day_from_coords(name: str, index: int, coords: Sequence[tuple[float, float]]) -> DaySegment:
    return DaySegment(index=index, name=name, coordinates=tuple(coords), bounds=compute_bounds(coords))


def assemble_trip(
    partition: DayPartition,
    trip_name: str = "",
    *,
    config: TripConfig | None = None,
    new_id: Callable[[], str] | None = None,
) -> Trip:
    """Turn a day partition into day segments, the aggregate and the index.

    Args:
        partition: Output of partition_by_day (non-empty).
        trip_name: Shown as subLabel of the aggregate index entry.
        config: Labels and details locations. Defaults to TripConfig().
        new_id: Identifier factory, defaults to random UUIDs.

    Returns:
        Trip with days numbered 1..N in chronological order. The aggregate's bounds
        are recomputed from all coordinates, not merged from the per-day boxes.
    """

    cfg = config or TripConfig()
    make_id = new_id or new_entry_id

    head_id = make_id()
    days: list[DaySegment] = []
    cumulative: list[tuple[float, float]] = []
    entries: list[TripIndexEntry] = []
    for i, key in enumerate(partition.day_keys):
        day_num = i + 1
        day = day_from_points(key, day_num, partition.buckets[key])
        days.append(day)
        cumulative.extend(day.coordinates)

        label = cfg.day_label(day_num)
        entries.append(
            TripIndexEntry(
                index=day_num,
                id=make_id(),
                label=label,
                sub_label=key,
                details_location=cfg.details_location(label),
            )
        )

    aggregate = day_from_coords(cfg.aggregate_label, 0, cumulative)
    head = TripIndexEntry(
        index=0,
        id=head_id,
        label=cfg.aggregate_label,
        sub_label=trip_name or "",
        details_location=cfg.details_location(cfg.aggregate_label),
    )
    return Trip(days=days, aggregate=aggregate, index=[head, *entries])
