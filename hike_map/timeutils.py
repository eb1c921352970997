"""Time parsing and formatting utilities."""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Callable

from zoneinfo import ZoneInfo

from hike_map.models import DAY_KEY_FORMAT


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "UTC" or "America/Denver".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：UTC、America/Denver") from exc


def parse_feed_time(text: str) -> datetime:
    """Parse a KML <when> value into a timezone-aware datetime.

    Garmin feeds use "2019-06-01T14:03:00Z"; offsets like "+02:00" and
    fractional seconds are accepted too. A value without any offset is taken as UTC.

    Raises:
        ValueError: If the text is not ISO-8601.
    """

    s = text.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def day_key(ts: datetime, tz_name: str, fmt: str = DAY_KEY_FORMAT) -> str:
    """Calendar-day key of a timestamp in the given timezone, e.g. "06/01/2019"."""

    return ts.astimezone(tzinfo_from_name(tz_name)).strftime(fmt)


def day_key_func(tz_name: str, fmt: str = DAY_KEY_FORMAT) -> Callable[[datetime], str]:
    """Build a one-argument day-key function bound to tz_name and fmt."""

    tz = tzinfo_from_name(tz_name)

    def _key(ts: datetime) -> str:
        return ts.astimezone(tz).strftime(fmt)

    return _key


def parse_cli_date(text: str) -> date:
    """Parse a "MM/DD/YYYY" date given on the command line.

    Raises:
        ValueError: If the text does not match the format.
    """

    try:
        return datetime.strptime(text.strip(), "%m/%d/%Y").date()
    except ValueError as exc:
        raise ValueError(f"无法解析日期：{text!r}。格式：MM/DD/YYYY，例如 06/01/2019") from exc


def date_range_bounds(
    start_d: date | None,
    end_d: date | None,
    tz_name: str,
) -> tuple[datetime | None, datetime | None]:
    """Convert an inclusive day range to datetimes [start 00:00, end+1 00:00) in tz.

    Either side may be None (unbounded).
    """

    tz = tzinfo_from_name(tz_name)
    start_dt = datetime.combine(start_d, time.min).replace(tzinfo=tz) if start_d is not None else None
    end_dt = (
        datetime.combine(end_d + timedelta(days=1), time.min).replace(tzinfo=tz) if end_d is not None else None
    )
    return start_dt, end_dt
