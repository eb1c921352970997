"""End-to-end run: waypoints -> filtered -> partitioned -> assembled -> written."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from hike_map.assemble import assemble_trip
from hike_map.config import TripConfig
from hike_map.errors import EmptyInputError
from hike_map.models import Trip, Waypoint
from hike_map.output import TripFiles, write_trip
from hike_map.partition import filter_by_date_range, partition_by_day
from hike_map.sources import SourceLoader
from hike_map.timeutils import day_key_func

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TripRun:
    """Result of generate_trip. files is None when nothing was written."""

    trip: Trip
    files: TripFiles | None


def load_points(
    source: SourceLoader,
    *,
    url: str | None = None,
    path: str | Path | None = None,
    credential: str | None = None,
) -> list[Waypoint]:
    """Load waypoints from a URL or a local file (exactly one must be given)."""

    if (url is None) == (path is None):
        raise ValueError("load_points() 需要 url 或 path 二选一")
    if url is not None:
        return source.load_from_resource(url, credential)
    return source.load_from_file(path)


def generate_trip(
    points: Sequence[Waypoint],
    config: TripConfig | None = None,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    trip_name: str = "",
    new_id: Callable[[], str] | None = None,
    write: bool = True,
) -> TripRun:
    """Build (and by default write) the trip artifacts.

    Args:
        points: Waypoints as loaded, any order.
        config: TripConfig.
        start: Inclusive lower time bound, or None.
        end: Exclusive upper time bound, or None.
        trip_name: subLabel of the aggregate index entry.
        new_id: Index id factory (random UUIDs by default).
        write: If False, only compute.

    Raises:
        EmptyInputError: If no points remain after filtering. Nothing is written.
        PersistenceError: If writing fails.
    """

    cfg = config or TripConfig()
    kept = filter_by_date_range(points, start, end)
    if not kept:
        raise EmptyInputError(f"时间范围内没有轨迹点（共 {len(points)} 个点，范围 [{start}, {end})）")

    partition = partition_by_day(kept, day_key_func(cfg.tz_name, cfg.day_format))
    trip = assemble_trip(partition, trip_name, config=cfg, new_id=new_id)
    logger.info("共 %s 个轨迹点，%s 天", len(kept), len(trip.days))

    files = write_trip(trip, cfg) if write else None
    return TripRun(trip=trip, files=files)
