"""CLI orchestration for populating decks with Grafana charts."""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .api import build_runtime, generate_report
from .catalog import describe_slide_titles, format_panel_listing, list_all_panels
from .config import GrafanaSettings, get_dashboard, load_dashboards, load_default_env_files
from .errors import GrafslidesError, ValidationError
from .models import UserInputs
from .slides import SlideDeck
from .urls import DATA_SOURCES, ENVIRONMENTS, INTERVALS, TIMEFRAMES


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grafana-slides",
        description="Fill slides with Grafana panel renders matched by slide title",
    )
    parser.add_argument("--env-file", default=None, help="Optional path to a .env file")
    parser.add_argument("--dashboards", default=None, help="Optional JSON dashboard registry (default: built-in set)")
    parser.add_argument("--cache-path", default=None, help="Panel cache file (default: $GRAFSLIDES_CACHE_PATH)")
    parser.add_argument("--grafana-url", default=None, help="Grafana base URL (default: $GRAFANA_URL)")
    parser.add_argument("--verbose", action="store_true", help="Log progress detail to stderr")
    parser.add_argument("--debug", action="store_true", help="Show full traceback for unexpected errors")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_gen = sub.add_parser("generate", help="Insert rendered charts into every slide whose title matches a panel")
    p_gen.add_argument("--pptx", required=True, help="Input presentation")
    p_gen.add_argument("--output", default=None, help="Output PPTX path (default: <input-stem>-report.pptx)")
    p_gen.add_argument("--tenant-id", required=True, help="Tenant ID substituted into every chart")
    p_gen.add_argument("--data-source", default=None, choices=sorted(DATA_SOURCES), help="Telemetry data source")
    p_gen.add_argument("--environment", default=None, choices=sorted(ENVIRONMENTS), help="Environment")
    p_gen.add_argument("--interval", default=None, choices=sorted(INTERVALS), help="Aggregation interval")
    p_gen.add_argument("--timeframe", default=None, choices=list(TIMEFRAMES), help="Time range")
    p_gen.add_argument("--assets-dir", default=None, help="Optional directory to keep downloaded chart PNGs")
    p_gen.set_defaults(func=cmd_generate)

    p_list = sub.add_parser("list-panels", help="List panels available for slide titles")
    scope = p_list.add_mutually_exclusive_group()
    scope.add_argument("--dashboard", default=None, help="Dashboard key (default: the configured default dashboard)")
    scope.add_argument("--all", action="store_true", help="List panels from every configured dashboard")
    p_list.set_defaults(func=cmd_list_panels)

    p_titles = sub.add_parser("show-titles", help="Show the title detected on each slide")
    p_titles.add_argument("--pptx", required=True, help="Input presentation")
    p_titles.set_defaults(func=cmd_show_titles)

    p_refresh = sub.add_parser("refresh-cache", help="Re-fetch and cache the panels of one dashboard")
    p_refresh.add_argument("--dashboard", default=None, help="Dashboard key (default: the configured default dashboard)")
    p_refresh.set_defaults(func=cmd_refresh_cache)

    p_clear = sub.add_parser("clear-cache", help="Remove every cached panel mapping")
    p_clear.set_defaults(func=cmd_clear_cache)
    return parser


def _settings(args: argparse.Namespace) -> GrafanaSettings:
    settings = GrafanaSettings.from_env()
    if args.cache_path:
        settings = replace(settings, cache_path=Path(args.cache_path).expanduser())
    if args.grafana_url:
        settings = replace(settings, base_url=args.grafana_url.rstrip("/"))
    return settings


def _registry(args: argparse.Namespace):
    return load_dashboards(Path(args.dashboards).expanduser() if args.dashboards else None)


def cmd_generate(args: argparse.Namespace) -> int:
    dashboards, _ = _registry(args)
    input_path = Path(args.pptx).resolve()
    output_path = (
        Path(args.output).resolve() if args.output else input_path.parent / f"{input_path.stem}-report.pptx"
    )
    inputs = UserInputs.from_mapping(
        {
            "tenantId": args.tenant_id,
            "data_source": args.data_source,
            "environment": args.environment,
            "interval": args.interval,
            "timeframe": args.timeframe,
        }
    )
    summary, saved = generate_report(
        presentation_path=input_path,
        output_path=output_path,
        inputs=inputs,
        settings=_settings(args),
        dashboards=dashboards,
        assets_dir=Path(args.assets_dir).resolve() if args.assets_dir else None,
    )
    print(summary.format_message(dashboards))
    for key, reason in summary.failed_dashboards.items():
        print(f"⚠️  Dashboard {key} skipped: {reason}", file=sys.stderr)
    print(f"✅ PPTX saved to {saved}")
    return 0


def cmd_list_panels(args: argparse.Namespace) -> int:
    dashboards, default_key = _registry(args)
    runtime = build_runtime(_settings(args), dashboards)
    if args.all:
        listing = list_all_panels(dashboards, runtime.cache)
        print(format_panel_listing(listing, dashboards))
        return 0

    dashboard = get_dashboard(dashboards, args.dashboard or default_key)
    panels = runtime.cache.panels(dashboard.key)
    print(f"{dashboard.name} ({len(panels)} panels)")
    for panel in panels:
        print(f"ID {panel.id}: {panel.title}")
    return 0


def cmd_show_titles(args: argparse.Namespace) -> int:
    deck = SlideDeck.open(Path(args.pptx).resolve())
    print(describe_slide_titles(deck))
    return 0


def cmd_refresh_cache(args: argparse.Namespace) -> int:
    dashboards, default_key = _registry(args)
    dashboard = get_dashboard(dashboards, args.dashboard or default_key)
    runtime = build_runtime(_settings(args), dashboards)
    mapping = runtime.cache.refresh(dashboard.key)
    print(f"✅ Panel cache refreshed for dashboard: {dashboard.name} ({len(mapping)} entries)")
    return 0


def cmd_clear_cache(args: argparse.Namespace) -> int:
    dashboards, _ = _registry(args)
    runtime = build_runtime(_settings(args), dashboards)
    cleared = runtime.cache.clear_all()
    print(f"✅ Cleared {cleared} panel cache(s)")
    return 0


def run_cli(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    load_default_env_files(explicit_env_file=args.env_file)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        code = int(args.func(args))
    except (ValidationError, GrafslidesError) as e:
        raise SystemExit(str(e)) from e
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        raise SystemExit(f"{args.cmd} failed: {e}") from e
    if code:
        raise SystemExit(code)
