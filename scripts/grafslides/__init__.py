"""Populate presentation slides with Grafana panel renders."""

from .api import build_runtime, generate_report
from .cache import PanelCache
from .cli import run_cli
from .client import GrafanaClient
from .config import DEFAULT_DASHBOARDS, GrafanaSettings, load_dashboards
from .errors import (
    ChartRenderError,
    ConfigValidationError,
    DashboardFetchError,
    DashboardNotFoundError,
    EmptyPresentationError,
    GrafslidesError,
    ValidationError,
)
from .extractor import extract_panels, fetch_dashboard_panels
from .index import UnifiedPanelIndex
from .models import ChartConfig, ChartImage, Dashboard, Panel, PanelConflict, ReportSummary, SlideFailure, UserInputs
from .report import ReportGenerator
from .slides import ChartPopulator, SlideDeck, extract_slide_title
from .store import JsonFileStore, MemoryStore
from .urls import build_dashboard_link, build_render_url

__all__ = [
    "ChartConfig",
    "ChartImage",
    "ChartPopulator",
    "ChartRenderError",
    "ConfigValidationError",
    "DEFAULT_DASHBOARDS",
    "Dashboard",
    "DashboardFetchError",
    "DashboardNotFoundError",
    "EmptyPresentationError",
    "GrafanaClient",
    "GrafanaSettings",
    "GrafslidesError",
    "JsonFileStore",
    "MemoryStore",
    "Panel",
    "PanelCache",
    "PanelConflict",
    "ReportGenerator",
    "ReportSummary",
    "SlideDeck",
    "SlideFailure",
    "UnifiedPanelIndex",
    "UserInputs",
    "ValidationError",
    "build_dashboard_link",
    "build_render_url",
    "build_runtime",
    "extract_panels",
    "extract_slide_title",
    "fetch_dashboard_panels",
    "generate_report",
    "load_dashboards",
    "run_cli",
]
