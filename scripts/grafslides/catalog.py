"""Listings for operators: available panels and detected slide titles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .cache import PanelCache
from .errors import DashboardFetchError, DashboardNotFoundError
from .models import Dashboard, Panel
from .report import Deck
from .slides import extract_slide_title

logger = logging.getLogger(__name__)


@dataclass
class PanelListing:
    by_dashboard: Dict[str, List[Panel]] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(len(panels) for panels in self.by_dashboard.values())


def list_all_panels(dashboards: Mapping[str, Dashboard], cache: PanelCache) -> PanelListing:
    listing = PanelListing()
    for key, dashboard in dashboards.items():
        try:
            listing.by_dashboard[key] = cache.panels(key)
        except (DashboardNotFoundError, DashboardFetchError) as e:
            logger.warning("Error loading dashboard %s: %s", dashboard.name, e)
            listing.failures[key] = str(e)
    return listing


def format_panel_listing(listing: PanelListing, dashboards: Mapping[str, Dashboard]) -> str:
    blocks: List[str] = []
    for key, panels in listing.by_dashboard.items():
        name = dashboards[key].name if key in dashboards else key
        lines = [f"━━━ {name} ━━━"]
        lines.extend(f"ID {panel.id}: {panel.title}" for panel in panels)
        blocks.append("\n".join(lines))
    for key, reason in listing.failures.items():
        blocks.append(f"⚠️  {key}: {reason}")
    blocks.append(f"Total: {listing.total} panels from {len(dashboards)} dashboard(s)")
    return "\n\n".join(blocks)


def describe_slide_titles(deck: Deck) -> str:
    found: List[str] = []
    untitled: List[str] = []
    for number, slide in enumerate(deck.slides, start=1):
        title = extract_slide_title(deck.list_text_shapes(slide))
        if title:
            found.append(f'{number}. "{title}"')
        else:
            untitled.append(str(number))

    message = f"Found {len(found)} slide(s) with titles:\n\n" + "\n".join(found)
    if untitled:
        message += "\n\nSlides without titles: " + ", ".join(untitled)
    return message
