from __future__ import annotations

import argparse
import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from xml.sax.saxutils import escape

KML_NS = "http://www.opengis.net/kml/2.2"


@dataclass(frozen=True, slots=True)
class Leg:
    name: str
    lat: float
    lon: float


def _wrap_lon(lon: float) -> float:
    """Keep longitude inside [-180, 180)."""

    return ((lon + 180.0) % 360.0) - 180.0


def generate_points(
    *,
    days: int,
    per_day: int,
    seed: int,
    start_utc: datetime,
    legs: list[Leg],
) -> list[tuple[str, float, float, datetime]]:
    """Generate fake (id, lat, lon, time) samples walking from leg to leg."""

    rng = random.Random(seed)
    out: list[tuple[str, float, float, datetime]] = []
    point_id = 100000 + rng.randint(0, 899999)
    for d in range(days):
        leg = legs[d % len(legs)]
        cur = start_utc + timedelta(days=d, hours=rng.uniform(0, 2))
        lat, lon = leg.lat, leg.lon
        for _ in range(per_day):
            lat += rng.uniform(-0.01, 0.01)
            lon = _wrap_lon(lon + rng.uniform(-0.01, 0.01))
            # 大约每 10 分钟一次（inReach 默认追踪间隔）
            cur = cur + timedelta(minutes=rng.uniform(8, 12))
            point_id += 1
            out.append((str(point_id), lat, lon, cur))
    return out


def _data(name: str, value: str) -> str:
    return f'<Data name="{escape(name)}"><value>{escape(value)}</value></Data>'


def render_kml(points: list[tuple[str, float, float, datetime]], title: str) -> str:
    """Render a Garmin-style feed; the last Placemark is the track summary."""

    parts = [
        '<?xml version="1.0" encoding="utf-8"?>',
        f'<kml xmlns="{KML_NS}">',
        "<Document>",
        f"<name>{escape(title)}</name>",
        "<Folder>",
        f"<name>{escape(title)}</name>",
    ]
    for pid, lat, lon, ts in points:
        when = ts.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        parts.append(
            "<Placemark>"
            f"<name>{escape(title)}</name>"
            f"<TimeStamp><when>{when}</when></TimeStamp>"
            "<ExtendedData>"
            + _data("Id", pid)
            + _data("Time UTC", ts.astimezone(UTC).strftime("%m/%d/%Y %I:%M:%S %p"))
            + _data("Latitude", f"{lat:.6f}")
            + _data("Longitude", f"{lon:.6f}")
            + _data("Event", "Tracking interval received.")
            + "</ExtendedData>"
            f"<Point><coordinates>{lon:.6f},{lat:.6f},0</coordinates></Point>"
            "</Placemark>"
        )
    line = " ".join(f"{lon:.6f},{lat:.6f},0" for _, lat, lon, _ in points)
    parts.append(
        f"<Placemark><name>{escape(title)}</name><LineString><tessellate>1</tessellate>"
        f"<coordinates>{line}</coordinates></LineString></Placemark>"
    )
    parts += ["</Folder>", "</Document>", "</kml>"]
    return "\n".join(parts) + "\n"


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake Garmin KML feed for demo/testing (privacy-safe).")
    p.add_argument("--out", type=str, default="sample_data/feed.kml", help="Output KML path")
    p.add_argument("--days", type=int, default=4, help="Number of days")
    p.add_argument("--per-day", type=int, default=40, help="Samples per day")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--start", type=str, default="2019-06-01 14:00:00", help="Start time in UTC")
    p.add_argument(
        "--antimeridian",
        action="store_true",
        help="Walk near the ±180° meridian (Fiji/Taveuni) so the boxes wrap",
    )
    args = p.parse_args()

    start_utc = datetime.fromisoformat(args.start).replace(tzinfo=UTC)
    if args.antimeridian:
        legs = [Leg("taveuni_west", -16.80, 179.98), Leg("taveuni_east", -16.85, -179.97)]
    else:
        legs = [
            Leg("campo", 32.5897, -116.4670),
            Leg("mount_laguna", 32.8683, -116.4197),
            Leg("julian", 33.0787, -116.6020),
        ]

    points = generate_points(days=args.days, per_day=args.per_day, seed=args.seed, start_utc=start_utc, legs=legs)
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_kml(points, "Sample Hiker"), encoding="utf-8")

    print(f"Generated: {out_path} (points={len(points)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
