#!/usr/bin/env python3
"""Populate a PPTX deck with Grafana panel renders matched by slide title.

Usage:
    python populate_charts.py generate --pptx weekly.pptx --tenant-id 12345 \
        --environment "US Production" --timeframe "Last 7 Days"

    python populate_charts.py list-panels --all
    python populate_charts.py show-titles --pptx weekly.pptx
    python populate_charts.py refresh-cache --dashboard api-breakdown
    python populate_charts.py clear-cache

Environment:
  GRAFANA_URL             Grafana base URL
  GRAFANA_API_KEY         Service-account token sent as a bearer header
  GRAFSLIDES_CACHE_PATH   Panel cache file (default ~/.cache/grafslides/panel_cache.json)
"""

from __future__ import annotations

from grafslides import run_cli


def main() -> None:
    run_cli()


if __name__ == "__main__":
    main()
