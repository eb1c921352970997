"""Geospatial utilities (no external dependencies)."""

from __future__ import annotations

from typing import Sequence

from hike_map.errors import DegenerateBoundsError
from hike_map.models import BoundingBox


def west_and_east(longitudes: Sequence[float]) -> tuple[float, float]:
    """Find the most logical western and eastern longitudes.

    If the sorted values spread more than 180 degrees the track is taken to cross
    the antimeridian, and the box wraps the other way: west is the highest value
    and east the lowest.

    Args:
        longitudes: Longitudes in degrees, non-empty.

    Returns:
        (west, east)
    """

    lon = sorted(longitudes)
    lowest = lon[0]
    highest = lon[-1]
    if highest - lowest > 180:
        return highest, lowest
    return lowest, highest


def compute_bounds(coordinates: Sequence[Sequence[float]]) -> BoundingBox:
    """Compute the outer points of [longitude, latitude] pairs.

    Args:
        coordinates: Non-empty sequence of (longitude, latitude).

    Returns:
        BoundingBox. Latitude is a plain min/max; longitude is antimeridian-aware.

    Raises:
        DegenerateBoundsError: If coordinates is empty.
    """

    if not coordinates:
        raise DegenerateBoundsError("compute_bounds() 需要至少一个坐标")

    lons = [c[0] for c in coordinates]
    lats = [c[1] for c in coordinates]
    west, east = west_and_east(lons)
    return BoundingBox(north=max(lats), south=min(lats), east=east, west=west)
