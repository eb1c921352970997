"""Persist a Trip as JSON files under the output folder.

Layout:
    <out>/details/Day 1.json ... Day N.json
    <out>/details/All.json
    <out>/index.json

Day and aggregate files are written first and index.json last, so an aborted
run never leaves an index pointing at files that were not written.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hike_map.config import TripConfig
from hike_map.errors import PersistenceError
from hike_map.models import Trip

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TripFiles:
    """Paths written by write_trip."""

    details: list[Path]
    aggregate: Path
    index: Path


def dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent="\t")


def _write_json(path: Path, payload: Any) -> None:
    """Write JSON atomic-ish (tmp file + replace)."""

    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(dumps(payload), encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            logger.warning("无法删除临时文件：%s", tmp)
        raise PersistenceError(f"写入失败：{path}（{exc}）") from exc
    logger.debug("wrote %s", path)


def write_trip(trip: Trip, config: TripConfig | None = None) -> TripFiles:
    """Write all artifacts of a trip.

    Args:
        trip: Output of assemble_trip.
        config: Output folder and file names. Defaults to TripConfig().

    Returns:
        TripFiles with the written paths.

    Raises:
        PersistenceError: If a folder or file cannot be written. Files already
            written stay on disk; index.json is not written in that case.
    """

    cfg = config or TripConfig()
    out = cfg.out_path
    try:
        (out / cfg.details_dir).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"无法创建输出目录：{out / cfg.details_dir}（{exc}）") from exc

    by_index = {e.index: e for e in trip.index}

    details: list[Path] = []
    for day in trip.days:
        path = out / by_index[day.index].details_location
        _write_json(path, day.to_dict())
        details.append(path)

    aggregate = out / by_index[0].details_location
    _write_json(aggregate, trip.aggregate.to_dict())

    index = out / cfg.index_file
    _write_json(index, [e.to_dict() for e in trip.index])

    logger.info("已写出 %s 个日文件 + %s + %s", len(details), aggregate.name, index.name)
    return TripFiles(details=details, aggregate=aggregate, index=index)
