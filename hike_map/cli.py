"""Command-line interface for hike_map.

Run:
    python -m hike_map generate --url https://share.garmin.com/Feed/Share/<name> --name "PCT 2019"
    python -m hike_map inspect --file feed.kml
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import date

from hike_map.config import TripConfig
from hike_map.errors import EmptyInputError, HikeMapError
from hike_map.inspect import inspect_trip
from hike_map.models import DEFAULT_TZ, Waypoint
from hike_map.partition import filter_by_date_range
from hike_map.pipeline import generate_trip, load_points
from hike_map.sources import SOURCES, get_source
from hike_map.timeutils import date_range_bounds, parse_cli_date, tzinfo_from_name

PASSWORD_ENV = "HIKE_MAP_PASSWORD"

logger = logging.getLogger("hike_map")


def _cli_date(text: str) -> date:
    try:
        return parse_cli_date(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _load(args: argparse.Namespace) -> list[Waypoint]:
    source = get_source(args.source)
    return load_points(source, url=args.url, path=args.file, credential=args.password or None)


def _range(args: argparse.Namespace):
    if args.start is not None and args.end is not None and args.start > args.end:
        raise ValueError("开始日期不能晚于结束日期。")
    return date_range_bounds(args.start, args.end, args.tz)


def _cmd_generate(args: argparse.Namespace) -> int:
    cfg = TripConfig(out_dir=args.out, tz_name=args.tz)
    start, end = _range(args)
    points = _load(args)

    try:
        run = generate_trip(points, cfg, start=start, end=end, trip_name=args.name)
    except EmptyInputError as exc:
        # 没有数据可写：正常结束，不生成任何文件
        print(f"没有可输出的天：{exc}", file=sys.stderr)
        return 0

    assert run.files is not None
    for day, entry in zip(run.trip.days, run.trip.index[1:]):
        print(f"{entry.label}: {day.name}, points={len(day.coordinates)}")
    print(f"All: points={len(run.trip.aggregate.coordinates)}")
    print(f"已导出：{run.files.index}")
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    cfg = TripConfig(tz_name=args.tz)
    start, end = _range(args)
    points = filter_by_date_range(_load(args), start, end)
    res = inspect_trip(points, cfg)

    print("### 轨迹点")
    print(f"points={res.points}, distinct_ids={res.distinct_ids}, missing_ids={res.missing_ids}")
    print(f"duplicate_timestamps={res.duplicate_timestamps}")
    print()

    if res.first is not None and res.last is not None:
        tz = tzinfo_from_name(args.tz)
        first = res.first.astimezone(tz)
        last = res.last.astimezone(tz)
        print(f"### 时间范围（{args.tz}）")
        print(f"start={first.isoformat(sep=' ')}, end={last.isoformat(sep=' ')}")
        print()

    if res.bounds is not None:
        b = res.bounds
        print("### 外包框")
        print(f"north={b.north}, south={b.south}, east={b.east}, west={b.west}")
        if b.crosses_antimeridian:
            print("（跨越 ±180° 经线）")
        print()

    print("### 按天")
    for i, d in enumerate(res.days, start=1):
        print(f"Day {i}: {d.key} points={d.points}")
    print()

    if args.json:
        print(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--source",
        type=str,
        default="garmin",
        choices=sorted(SOURCES),
        help="数据源类型（目前仅支持 garmin）",
    )
    where = p.add_mutually_exclusive_group(required=True)
    where.add_argument("--url", type=str, default=None, help="KML feed 地址")
    where.add_argument("--file", type=str, default=None, help="本地 KML 文件路径")
    p.add_argument(
        "--password",
        type=str,
        default=os.environ.get(PASSWORD_ENV, ""),
        help=f"feed 密码（默认读取环境变量 {PASSWORD_ENV}）",
    )
    p.add_argument("--start", type=_cli_date, default=None, help="开始日期（含），格式 MM/DD/YYYY")
    p.add_argument("--end", type=_cli_date, default=None, help="结束日期（含当天），格式 MM/DD/YYYY")
    p.add_argument("--tz", type=str, default=DEFAULT_TZ, help="按哪个时区划分日期（IANA），默认 UTC")
    p.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="hike_map")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_gen = sub.add_parser("generate", help="按天拆分轨迹并导出 trips/ 下的 JSON")
    _add_source_args(p_gen)
    p_gen.add_argument("--name", type=str, default="", help="行程名称（写入 All 条目的 subLabel）")
    p_gen.add_argument("--out", type=str, default="trips", help="输出目录")
    p_gen.set_defaults(func=_cmd_generate)

    p_ins = sub.add_parser("inspect", help="查看 feed 的点数/时间范围/按天统计，不写文件")
    _add_source_args(p_ins)
    p_ins.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_ins.set_defaults(func=_cmd_inspect)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        return int(args.func(args))
    except (HikeMapError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
