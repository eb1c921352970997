"""Split waypoints into calendar-day buckets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from hike_map.errors import EmptyInputError
from hike_map.models import Waypoint, sort_waypoints

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DayPartition:
    """Result of partition_by_day.

    Attributes:
        day_keys: Calendar-day keys in chronological order, no duplicates.
        buckets: key -> that day's points, sorted by timestamp.
    """

    day_keys: list[str]
    buckets: dict[str, list[Waypoint]]

    def __len__(self) -> int:
        return len(self.day_keys)

    @property
    def total_points(self) -> int:
        return sum(len(v) for v in self.buckets.values())


def filter_by_date_range(
    points: Sequence[Waypoint],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Waypoint]:
    """Keep points with start <= timestamp < end.

    Args:
        points: Waypoints in any order.
        start: Inclusive lower bound, or None for unbounded.
        end: Exclusive upper bound, or None for unbounded.

    Returns:
        A new list; input order is preserved.
    """

    if start is None and end is None:
        return list(points)
    out = [
        p
        for p in points
        if (start is None or p.timestamp >= start) and (end is None or p.timestamp < end)
    ]
    logger.debug("date filter [%s, %s): kept %s of %s points", start, end, len(out), len(points))
    return out


def partition_by_day(points: Sequence[Waypoint], day_key: Callable[[datetime], str]) -> DayPartition:
    """Sort points and group consecutive runs by calendar day.

    Args:
        points: Waypoints (can be unsorted).
        day_key: Maps a timestamp to its calendar-day key.

    Returns:
        DayPartition whose buckets together hold every input point exactly once.

    Raises:
        EmptyInputError: If points is empty.
        ValueError: If day_key maps two separate runs of days to the same key
            (a format such as "%d" that is not unique per calendar day).
    """

    if not points:
        raise EmptyInputError("没有可分组的轨迹点")

    pts = sort_waypoints(points)

    day_keys: list[str] = []
    buckets: dict[str, list[Waypoint]] = {}

    def _close(key: str, bucket: list[Waypoint]) -> None:
        if key in buckets:
            # 日期格式不单调（例如 "%d"、"%A"）时同一个 key 会再次出现
            raise ValueError(f"日期 key {key!r} 在其他日期之后重复出现：日期格式不能区分不同的日历日")
        buckets[key] = bucket
        day_keys.append(key)

    last_key = day_key(pts[0].timestamp)
    start = 0
    for i in range(1, len(pts)):
        cur_key = day_key(pts[i].timestamp)
        if cur_key != last_key:
            # 半开区间 [start, i)：切换点之前的那个点仍属于上一天
            _close(last_key, pts[start:i])
            last_key = cur_key
            start = i
    _close(last_key, pts[start:])

    logger.debug("partitioned %s points into %s days", len(pts), len(day_keys))
    return DayPartition(day_keys=day_keys, buckets=buckets)
