from __future__ import annotations

import random
from collections import Counter
from datetime import UTC, datetime, timedelta

import pytest

from hike_map.errors import EmptyInputError
from hike_map.models import Waypoint, sort_waypoints
from hike_map.partition import filter_by_date_range, partition_by_day
from hike_map.timeutils import day_key_func

utc_key = day_key_func("UTC")


def _random_points(seed: int) -> list[Waypoint]:
    rng = random.Random(seed)
    base = datetime(2019, 6, 1, tzinfo=UTC)
    # 少量候选时间 -> 必然出现重复时间戳、重复日期
    candidates = [base + timedelta(hours=rng.randint(0, 24 * 6)) for _ in range(15)]
    n = rng.randint(1, 80)
    pts = [
        Waypoint(
            id=f"p{i}",
            latitude=rng.uniform(-60, 60),
            longitude=rng.uniform(-180, 180),
            timestamp=rng.choice(candidates),
        )
        for i in range(n)
    ]
    rng.shuffle(pts)
    return pts


@pytest.mark.parametrize("seed", range(25))
def test_no_point_loss_and_chronological_keys(seed: int) -> None:
    pts = _random_points(seed)
    res = partition_by_day(pts, utc_key)

    got = [p.id for key in res.day_keys for p in res.buckets[key]]
    assert Counter(got) == Counter(p.id for p in pts)
    assert res.total_points == len(pts)
    assert len(set(res.day_keys)) == len(res.day_keys)
    assert set(res.day_keys) == set(res.buckets)

    firsts = [min(p.timestamp for p in res.buckets[k]) for k in res.day_keys]
    assert all(a < b for a, b in zip(firsts, firsts[1:]))
    for key in res.day_keys:
        assert all(utc_key(p.timestamp) == key for p in res.buckets[key])


def test_two_point_day_transition_keeps_both(wp) -> None:
    a = wp("2019-06-01T23:59:00", id="a")
    b = wp("2019-06-02T00:01:00", id="b")
    res = partition_by_day([b, a], utc_key)

    assert res.day_keys == ["06/01/2019", "06/02/2019"]
    assert [p.id for p in res.buckets["06/01/2019"]] == ["a"]
    assert [p.id for p in res.buckets["06/02/2019"]] == ["b"]


def test_point_before_transition_stays_in_closing_day(wp) -> None:
    pts = [
        wp("2019-06-01T10:00:00", id="1"),
        wp("2019-06-01T12:00:00", id="2"),
        wp("2019-06-01T23:00:00", id="3"),
        wp("2019-06-02T01:00:00", id="4"),
        wp("2019-06-03T01:00:00", id="5"),
    ]
    res = partition_by_day(pts, utc_key)
    assert [[p.id for p in res.buckets[k]] for k in res.day_keys] == [["1", "2", "3"], ["4"], ["5"]]


def test_single_point(wp) -> None:
    res = partition_by_day([wp("2019-06-01T10:00:00", id="only")], utc_key)
    assert res.day_keys == ["06/01/2019"]
    assert len(res) == 1
    assert res.buckets["06/01/2019"][0].id == "only"


def test_empty_input_raises() -> None:
    with pytest.raises(EmptyInputError):
        partition_by_day([], utc_key)


def test_equal_timestamps_keep_input_order(wp) -> None:
    early = wp("2019-06-01T08:00:00", id="early")
    a = wp("2019-06-01T09:00:00", id="a")
    b = wp("2019-06-01T09:00:00", id="b")

    assert [p.id for p in sort_waypoints([a, b, early])] == ["early", "a", "b"]
    assert [p.id for p in sort_waypoints([b, early, a])] == ["early", "b", "a"]

    res = partition_by_day([a, b, early], utc_key)
    assert [p.id for p in res.buckets["06/01/2019"]] == ["early", "a", "b"]


def test_day_keys_follow_timezone(wp) -> None:
    # 2019-06-02 03:00Z is still June 1st in Denver (UTC-6 in summer)
    pts = [wp("2019-06-01T20:00:00", id="a"), wp("2019-06-02T03:00:00", id="b")]
    assert partition_by_day(pts, utc_key).day_keys == ["06/01/2019", "06/02/2019"]
    assert partition_by_day(pts, day_key_func("America/Denver")).day_keys == ["06/01/2019"]


def test_filter_half_open_range(wp) -> None:
    d = datetime(2019, 6, 1, tzinfo=UTC)
    at_start = wp("2019-06-01T00:00:00", id="start")
    before = wp("2019-05-31T23:59:59", id="before")
    inside = wp("2019-06-02T12:00:00", id="inside")
    last_us = wp("2019-06-02T23:59:59.999999", id="last")
    at_end = wp("2019-06-03T00:00:00", id="end")
    pts = [at_end, inside, before, at_start, last_us]

    kept = filter_by_date_range(pts, d, d + timedelta(days=2))
    assert [p.id for p in kept] == ["inside", "start", "last"]


def test_filter_open_bounds(wp) -> None:
    pts = [wp("2019-06-01T00:00:00", id="a"), wp("2019-06-05T00:00:00", id="b")]
    cut = datetime(2019, 6, 3, tzinfo=UTC)

    assert filter_by_date_range(pts) == pts
    assert filter_by_date_range(pts) is not pts
    assert [p.id for p in filter_by_date_range(pts, start=cut)] == ["b"]
    assert [p.id for p in filter_by_date_range(pts, end=cut)] == ["a"]


def test_filter_can_empty_everything(wp) -> None:
    pts = [wp("2019-06-01T00:00:00")]
    assert filter_by_date_range(pts, start=datetime(2020, 1, 1, tzinfo=UTC)) == []


def test_repeating_day_key_is_rejected(wp) -> None:
    pts = [
        wp("2019-06-01T10:00:00", id="jun1"),
        wp("2019-06-02T10:00:00", id="jun2"),
        wp("2019-07-01T10:00:00", id="jul1"),
    ]
    # "%d" gives "01" for both Jun 1 and Jul 1
    with pytest.raises(ValueError, match="'01'"):
        partition_by_day(pts, day_key_func("UTC", "%d"))


def test_non_unique_format_is_fine_while_runs_do_not_repeat(wp) -> None:
    pts = [wp("2019-06-01T10:00:00", id="a"), wp("2019-06-02T10:00:00", id="b")]
    res = partition_by_day(pts, day_key_func("UTC", "%d"))
    assert res.day_keys == ["01", "02"]
