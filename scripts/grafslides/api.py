"""Public API helpers for programmatic report generation."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Mapping, Optional, Tuple

import requests

from .cache import PanelCache
from .client import GrafanaClient
from .config import GrafanaSettings
from .extractor import fetch_dashboard_panels
from .models import Dashboard, ReportSummary, UserInputs
from .report import ReportGenerator
from .slides import ChartPopulator, SlideDeck
from .store import JsonFileStore, KeyValueStore


@dataclass
class Runtime:
    client: GrafanaClient
    store: KeyValueStore
    cache: PanelCache


def build_runtime(
    settings: GrafanaSettings,
    dashboards: Mapping[str, Dashboard],
    *,
    store: Optional[KeyValueStore] = None,
    session: Optional[requests.Session] = None,
) -> Runtime:
    """Wire the Grafana client, the persisted store and the panel cache."""
    client = GrafanaClient(
        settings.base_url,
        settings.api_key,
        session=session,
        timeout=settings.timeout,
        verify_tls=settings.verify_tls,
    )
    store = store if store is not None else JsonFileStore(settings.cache_path)
    cache = PanelCache(store, partial(fetch_dashboard_panels, dashboards=dashboards, source=client))
    return Runtime(client=client, store=store, cache=cache)


def generate_report(
    *,
    presentation_path: Path,
    output_path: Path,
    inputs: UserInputs,
    settings: GrafanaSettings,
    dashboards: Mapping[str, Dashboard],
    store: Optional[KeyValueStore] = None,
    session: Optional[requests.Session] = None,
    assets_dir: Optional[Path] = None,
) -> Tuple[ReportSummary, Path]:
    """Populate a deck with rendered charts and save it to ``output_path``."""
    runtime = build_runtime(settings, dashboards, store=store, session=session)
    deck = SlideDeck.open(presentation_path)
    generator = ReportGenerator(
        dashboards=dashboards,
        cache=runtime.cache,
        deck=deck,
        populate=ChartPopulator(deck, runtime.client, assets_dir=assets_dir),
        grafana_url=settings.base_url,
    )
    summary = generator.generate(inputs)
    return summary, deck.save(output_path)
