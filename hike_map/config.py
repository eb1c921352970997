"""Run configuration passed explicitly through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from hike_map.models import DAY_KEY_FORMAT, DEFAULT_TZ


@dataclass(frozen=True, slots=True)
class TripConfig:
    """Where and how trip artifacts are produced.

    Attributes:
        out_dir: Root output folder (index.json lives here).
        details_dir: Sub-folder of out_dir holding one JSON per day.
        index_file: File name of the index inside out_dir.
        day_format: strftime format of the calendar-day key, e.g. "01/02/2006".
        tz_name: IANA timezone used to decide which calendar day a point is on.
        aggregate_label: Name/label of the synthetic all-days record.
        day_label_prefix: Labels of day records are f"{prefix} {n}".
    """

    out_dir: str | Path = "trips"
    details_dir: str = "details"
    index_file: str = "index.json"
    day_format: str = DAY_KEY_FORMAT
    tz_name: str = DEFAULT_TZ
    aggregate_label: str = "All"
    day_label_prefix: str = "Day"

    def day_label(self, day_number: int) -> str:
        return f"{self.day_label_prefix} {day_number}"

    def details_location(self, name: str) -> str:
        """Path of a details file relative to out_dir, as written into index.json."""

        return f"{self.details_dir}/{name}.json"

    @property
    def out_path(self) -> Path:
        return Path(self.out_dir)

