"""Module entry point: python -m hike_map ..."""

from __future__ import annotations

from hike_map.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
