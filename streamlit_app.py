from __future__ import annotations

from datetime import date
from pathlib import Path

import streamlit as st

from hike_map.config import TripConfig
from hike_map.errors import EmptyInputError, HikeMapError
from hike_map.models import DEFAULT_TZ, Trip, Waypoint
from hike_map.pipeline import generate_trip
from hike_map.sources import SOURCES, get_source
from hike_map.timeutils import date_range_bounds


FEED_TTL_SECONDS = 300


# feed 是实时更新的：缓存最多保留 FEED_TTL_SECONDS，也可以手动刷新
@st.cache_data(show_spinner=False, ttl=FEED_TTL_SECONDS)
def _load_url(source: str, url: str, password: str) -> list[Waypoint]:
    return get_source(source).load_from_resource(url, password or None)


def _refresh_feed() -> None:
    """Drop cached feed downloads so the next load fetches again."""

    _load_url.clear()


@st.cache_data(show_spinner=False)
def _load_bytes(source: str, raw: bytes) -> list[Waypoint]:
    return get_source(source).load_from_bytes(raw)


def _bounds_row(trip: Trip) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for seg in [*trip.days, trip.aggregate]:
        b = seg.bounds
        rows.append(
            {
                "index": seg.index,
                "name": seg.name,
                "points": len(seg.coordinates),
                "north": b.north,
                "south": b.south,
                "east": b.east,
                "west": b.west,
                "antimeridian": b.crosses_antimeridian,
            }
        )
    return rows


def main() -> None:
    st.set_page_config(page_title="徒步轨迹：按天拆分", layout="wide")
    st.title("徒步轨迹：按天拆分并导出 trips/")

    with st.sidebar:
        st.subheader("数据源")
        source = st.selectbox("数据源类型", options=sorted(SOURCES), index=0)
        url = st.text_input("KML feed 地址", value="")
        password = st.text_input("feed 密码（可选）", value="", type="password")
        st.button(f"重新拉取 feed（否则缓存 {FEED_TTL_SECONDS // 60} 分钟）", on_click=_refresh_feed)
        uploaded = st.file_uploader("或上传本地 KML", type=["kml", "xml"])

        st.subheader("时区与时间范围")
        tz_name = st.text_input("时区（IANA）", value=DEFAULT_TZ)
        use_range = st.checkbox("只处理指定日期范围", value=False)
        start_d: date | None = None
        end_d: date | None = None
        if use_range:
            start_d = st.date_input("开始日期（含）")
            end_d = st.date_input("结束日期（含）")

        st.subheader("输出")
        trip_name = st.text_input("行程名称", value="")
        out_dir = st.text_input("输出目录", value="trips")

    if uploaded is None and not url:
        st.info("请在左侧填写 feed 地址或上传 KML 文件。")
        return

    if start_d is not None and end_d is not None and start_d > end_d:
        st.error("开始日期不能晚于结束日期。")
        return

    try:
        with st.spinner("正在读取 feed ..."):
            if uploaded is not None:
                points = _load_bytes(source, uploaded.getvalue())
            else:
                points = _load_url(source, url, password)
        start, end = date_range_bounds(start_d, end_d, tz_name)
        cfg = TripConfig(out_dir=out_dir, tz_name=tz_name)
        run = generate_trip(points, cfg, start=start, end=end, trip_name=trip_name, write=False)
    except EmptyInputError as exc:
        st.warning(f"没有可输出的天：{exc}")
        return
    except (HikeMapError, ValueError) as exc:
        st.exception(exc)
        return

    trip = run.trip
    st.subheader("汇总")
    c1, c2, c3 = st.columns(3)
    c1.metric("轨迹点", str(len(trip.aggregate.coordinates)))
    c2.metric("天数", str(len(trip.days)))
    c3.metric("跨越 ±180°", "是" if trip.aggregate.bounds.crosses_antimeridian else "否")

    st.subheader("按天外包框")
    st.dataframe(_bounds_row(trip), use_container_width=True, height=360)

    with st.expander("index.json 预览", expanded=False):
        st.json([e.to_dict() for e in trip.index])

    if st.button("导出到输出目录", type="primary"):
        try:
            written = generate_trip(points, cfg, start=start, end=end, trip_name=trip_name)
        except HikeMapError as exc:
            st.exception(exc)
            return
        assert written.files is not None
        st.success(f"已导出：{written.files.index}（日文件 {len(written.files.details)} 个）")

    st.caption(
        "说明：日期范围按所选时区计算，区间为 [开始日 00:00, 结束日+1 00:00)。"
        f"输出目录：{Path(out_dir).resolve()}"
    )


if __name__ == "__main__":
    main()
