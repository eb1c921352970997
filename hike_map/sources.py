"""Feed loaders: raw vendor documents -> Waypoint lists.

Each vendor format is one loader class registered in SOURCES under a short
source-type name ("garmin", ...). The rest of the pipeline only sees
Waypoint objects, so adding a vendor does not touch partitioning or output.
"""

from __future__ import annotations

import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Protocol

from hike_map.errors import RetrievalError, SourceFormatError
from hike_map.fetch import FetchConfig, fetch_url
from hike_map.models import Waypoint
from hike_map.timeutils import parse_feed_time

logger = logging.getLogger(__name__)


class SourceLoader(Protocol):
    """What the pipeline needs from a vendor loader."""

    def load_from_bytes(self, raw: bytes) -> list[Waypoint]: ...

    def load_from_resource(self, locator: str, credential: str | None = None) -> list[Waypoint]: ...

    def load_from_file(self, path: str | Path) -> list[Waypoint]: ...


def _local(tag: str) -> str:
    """Return the local name of an XML tag regardless of namespace."""

    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else tag


def _child(el: ET.Element, name: str) -> ET.Element | None:
    for c in el:
        if _local(c.tag) == name:
            return c
    return None


def _children(el: ET.Element, name: str) -> Iterator[ET.Element]:
    for c in el:
        if _local(c.tag) == name:
            yield c


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Counters collected while reading one feed."""

    placemarks_total: int
    points_loaded: int
    skipped_no_time: int
    field_fallbacks: int


def _extended_data(pm: ET.Element) -> dict[str, str]:
    """ExtendedData/Data name -> value text (first occurrence wins)."""

    out: dict[str, str] = {}
    ext = _child(pm, "ExtendedData")
    if ext is None:
        return out
    for data in _children(ext, "Data"):
        name = data.get("name")
        if name is None or name in out:
            continue
        value = _child(data, "value")
        out[name] = (value.text or "") if value is not None else ""
    return out


def _float_field(data: dict[str, str], name: str) -> float | None:
    """Parse a numeric field; None means "use the fallback"."""

    text = data.get(name)
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    # "nan"/"inf" 能被 float() 解析，但写进 JSON 就不是合法 JSON 了
    return value if math.isfinite(value) else None


class GarminKmlLoader:
    """Loader for Garmin inReach / MapShare KML feeds.

    Feed layout (observed):
        kml/Document/Folder/Placemark, one Placemark per tracked point with
        TimeStamp/when and ExtendedData/Data entries named "Id", "Latitude",
        "Longitude" (plus many others we ignore). The last Placemark is a
        LineString summarising the track and carries no point data.
    """

    source_type = "garmin"

    def __init__(self, fetch_cfg: FetchConfig | None = None) -> None:
        self._fetch_cfg = fetch_cfg or FetchConfig()
        self.last_summary: LoadSummary | None = None

    def load_from_bytes(self, raw: bytes) -> list[Waypoint]:
        """Parse KML bytes into waypoints in document order.

        Raises:
            SourceFormatError: If raw is not well-formed XML.
        """

        try:
            root = ET.fromstring(raw)
        except ET.ParseError as exc:
            raise SourceFormatError(f"KML 解析失败：{exc}") from exc

        placemarks = self._placemarks(root)
        total = len(placemarks)
        # 最后一个 Placemark 是轨迹汇总（没有扩展数据），不是轨迹点
        placemarks = placemarks[:-1]

        points: list[Waypoint] = []
        skipped = 0
        fallbacks = 0
        for pm in placemarks:
            ts_el = _child(pm, "TimeStamp")
            when = _child(ts_el, "when") if ts_el is not None else None
            try:
                ts = parse_feed_time(when.text or "") if when is not None else None
            except ValueError:
                ts = None
            if ts is None:
                skipped += 1
                continue

            data = _extended_data(pm)
            lat = _float_field(data, "Latitude")
            lon = _float_field(data, "Longitude")
            point_id = data.get("Id")
            for name, value in (("Latitude", lat), ("Longitude", lon), ("Id", point_id)):
                if value is None:
                    fallbacks += 1
                    logger.debug("Placemark at %s: missing/invalid %s, using default", ts.isoformat(), name)

            points.append(
                Waypoint(
                    id=point_id if point_id is not None else "",
                    latitude=lat if lat is not None else 0.0,
                    longitude=lon if lon is not None else 0.0,
                    timestamp=ts,
                )
            )

        if skipped > 0:
            logger.warning("KML中有 %s 个 Placemark 缺少有效时间戳，已跳过", skipped)
        if fallbacks > 0:
            logger.warning("KML中有 %s 个字段缺失或无法解析，已使用默认值（0 / 空字符串）", fallbacks)

        self.last_summary = LoadSummary(
            placemarks_total=total,
            points_loaded=len(points),
            skipped_no_time=skipped,
            field_fallbacks=fallbacks,
        )
        return points

    def load_from_resource(self, locator: str, credential: str | None = None) -> list[Waypoint]:
        """Fetch the feed from a URL and parse it.

        Raises:
            RetrievalError: If the feed cannot be fetched.
            SourceFormatError: If the body is not KML.
        """

        return self.load_from_bytes(fetch_url(locator, credential, self._fetch_cfg))

    def load_from_file(self, path: str | Path) -> list[Waypoint]:
        """Parse a KML file saved on disk.

        Raises:
            RetrievalError: If the file cannot be read.
        """

        try:
            raw = Path(path).read_bytes()
        except OSError as exc:
            raise RetrievalError(f"无法读取文件：{path}（{exc}）") from exc
        return self.load_from_bytes(raw)

    @staticmethod
    def _placemarks(root: ET.Element) -> list[ET.Element]:
        if _local(root.tag) != "kml":
            raise SourceFormatError(f"不是 KML 文档：根元素为 <{_local(root.tag)}>")
        doc = _child(root, "Document")
        if doc is None:
            return []
        folder = _child(doc, "Folder")
        if folder is None:
            return []
        return list(_children(folder, "Placemark"))


SOURCES: dict[str, type] = {
    GarminKmlLoader.source_type: GarminKmlLoader,
}


def get_source(name: str, fetch_cfg: FetchConfig | None = None) -> SourceLoader:
    """Instantiate the loader registered under name.

    Raises:
        ValueError: If name is not a known source type.
    """

    try:
        cls = SOURCES[name]
    except KeyError as exc:
        raise ValueError(f"未知数据源：{name!r}。支持：{', '.join(sorted(SOURCES))}") from exc
    return cls(fetch_cfg)
