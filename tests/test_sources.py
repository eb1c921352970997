from __future__ import annotations

import logging
from datetime import UTC, datetime

import pytest

from hike_map.errors import RetrievalError, SourceFormatError
from hike_map.sources import SOURCES, GarminKmlLoader, get_source


def test_loads_points_and_drops_summary(two_day_kml) -> None:
    loader = GarminKmlLoader()
    pts = loader.load_from_bytes(two_day_kml)

    assert [p.id for p in pts] == ["4", "1", "2", "5", "3"]
    assert pts[1].latitude == 32.59
    assert pts[1].longitude == -116.47
    assert pts[1].timestamp == datetime(2019, 6, 1, 14, 0, tzinfo=UTC)
    assert loader.last_summary is not None
    assert loader.last_summary.placemarks_total == 6
    assert loader.last_summary.points_loaded == 5


def test_last_placemark_always_dropped(kml, placemark) -> None:
    raw = kml(
        [placemark("2019-06-01T14:00:00Z", "1", "2", "a"), placemark("2019-06-01T15:00:00Z", "3", "4", "b")],
        summary=False,
    )
    assert [p.id for p in GarminKmlLoader().load_from_bytes(raw)] == ["a"]


def test_missing_or_bad_fields_fall_back(kml, placemark, caplog) -> None:
    raw = kml(
        [
            placemark("2019-06-01T14:00:00Z", lat=None, lon="-116.4", id="1"),
            placemark("2019-06-01T15:00:00Z", lat="32.5", lon="abc", id=None),
        ]
    )
    with caplog.at_level(logging.WARNING, logger="hike_map.sources"):
        pts = GarminKmlLoader().load_from_bytes(raw)

    assert (pts[0].latitude, pts[0].longitude, pts[0].id) == (0.0, -116.4, "1")
    assert (pts[1].latitude, pts[1].longitude, pts[1].id) == (32.5, 0.0, "")
    assert "默认值" in caplog.text


def test_placemark_without_timestamp_is_skipped(kml, placemark) -> None:
    raw = kml([placemark(None, "1", "2", "no-time"), placemark("not a time", "1", "2", "bad"), placemark("2019-06-01T14:00:00Z", "1", "2", "ok")])
    loader = GarminKmlLoader()
    assert [p.id for p in loader.load_from_bytes(raw)] == ["ok"]
    assert loader.last_summary.skipped_no_time == 2


def test_timestamp_offsets(kml, placemark) -> None:
    raw = kml([placemark("2019-06-01T16:00:00+02:00", "1", "2", "a")])
    (p,) = GarminKmlLoader().load_from_bytes(raw)
    assert p.timestamp == datetime(2019, 6, 1, 14, 0, tzinfo=UTC)


def test_without_namespace(kml, placemark) -> None:
    raw = kml([placemark("2019-06-01T14:00:00Z", "1", "2", "a")], namespaced=False)
    assert len(GarminKmlLoader().load_from_bytes(raw)) == 1


def test_only_summary_or_no_folder_gives_nothing(kml) -> None:
    assert GarminKmlLoader().load_from_bytes(kml([])) == []
    raw = b'<kml xmlns="http://www.opengis.net/kml/2.2"><Document><name>x</name></Document></kml>'
    assert GarminKmlLoader().load_from_bytes(raw) == []


def test_malformed_xml() -> None:
    with pytest.raises(SourceFormatError):
        GarminKmlLoader().load_from_bytes(b"<kml><Document>")


def test_not_kml() -> None:
    with pytest.raises(SourceFormatError):
        GarminKmlLoader().load_from_bytes(b"<gpx><trk/></gpx>")


def test_load_from_file(tmp_path, two_day_kml) -> None:
    f = tmp_path / "feed.kml"
    f.write_bytes(two_day_kml)
    assert len(GarminKmlLoader().load_from_file(f)) == 5


def test_load_from_missing_file(tmp_path) -> None:
    with pytest.raises(RetrievalError):
        GarminKmlLoader().load_from_file(tmp_path / "missing.kml")


def test_load_from_resource_uses_fetch(monkeypatch, two_day_kml) -> None:
    calls = []

    def fake_fetch(url, credential=None, cfg=None):
        calls.append((url, credential))
        return two_day_kml

    monkeypatch.setattr("hike_map.sources.fetch_url", fake_fetch)
    pts = GarminKmlLoader().load_from_resource("https://example.test/feed", "secret")

    assert len(pts) == 5
    assert calls == [("https://example.test/feed", "secret")]


def test_registry() -> None:
    assert "garmin" in SOURCES
    assert isinstance(get_source("garmin"), GarminKmlLoader)
    with pytest.raises(ValueError, match="garmin"):
        get_source("spot")


def test_non_finite_coordinates_fall_back(kml, placemark) -> None:
    raw = kml(
        [
            placemark("2019-06-01T14:00:00Z", lat="nan", lon="inf", id="a"),
            placemark("2019-06-01T15:00:00Z", lat="-Infinity", lon="32.5", id="b"),
        ]
    )
    pts = GarminKmlLoader().load_from_bytes(raw)

    assert [(p.latitude, p.longitude) for p in pts] == [(0.0, 0.0), (0.0, 32.5)]
