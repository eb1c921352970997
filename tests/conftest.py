from __future__ import annotations

from datetime import UTC, datetime
from typing import Callable

import pytest

from hike_map.models import Waypoint

KML_NS = "http://www.opengis.net/kml/2.2"


def _wp(when: str, lat: float = 0.0, lon: float = 0.0, id: str = "") -> Waypoint:
    ts = datetime.fromisoformat(when)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return Waypoint(id=id, latitude=lat, longitude=lon, timestamp=ts)


def _placemark(
    when: str | None,
    lat: str | None = None,
    lon: str | None = None,
    id: str | None = None,
) -> str:
    data = []
    if id is not None:
        data.append(f'<Data name="Id"><value>{id}</value></Data>')
    if lat is not None:
        data.append(f'<Data name="Latitude"><value>{lat}</value></Data>')
    if lon is not None:
        data.append(f'<Data name="Longitude"><value>{lon}</value></Data>')
    data.append('<Data name="Event"><value>Tracking interval received.</value></Data>')
    ts = f"<TimeStamp><when>{when}</when></TimeStamp>" if when is not None else ""
    return f"<Placemark><name>Hiker</name>{ts}<ExtendedData>{''.join(data)}</ExtendedData></Placemark>"


_SUMMARY = (
    "<Placemark><name>Hiker</name><LineString><coordinates>"
    "-116.4,32.5,0 -116.5,32.6,0</coordinates></LineString></Placemark>"
)


def _kml(placemarks: list[str], namespaced: bool = True, summary: bool = True) -> bytes:
    ns = f' xmlns="{KML_NS}"' if namespaced else ""
    body = "".join(placemarks) + (_SUMMARY if summary else "")
    return (
        f'<?xml version="1.0" encoding="utf-8"?><kml{ns}><Document><name>Hiker</name>'
        f"<Folder><name>Hiker</name>{body}</Folder></Document></kml>"
    ).encode("utf-8")


@pytest.fixture
def wp() -> Callable[..., Waypoint]:
    return _wp


@pytest.fixture
def placemark() -> Callable[..., str]:
    return _placemark


@pytest.fixture
def kml() -> Callable[..., bytes]:
    return _kml


@pytest.fixture
def two_day_kml() -> bytes:
    """5 points: 3 on 06/01/2019 and 2 on 06/02/2019 (UTC), out of order."""

    return _kml(
        [
            _placemark("2019-06-02T08:00:00Z", "32.70", "-116.40", "4"),
            _placemark("2019-06-01T14:00:00Z", "32.59", "-116.47", "1"),
            _placemark("2019-06-01T18:30:00Z", "32.65", "-116.45", "2"),
            _placemark("2019-06-02T15:10:00Z", "32.80", "-116.42", "5"),
            _placemark("2019-06-01T23:59:00Z", "32.61", "-116.50", "3"),
        ]
    )
