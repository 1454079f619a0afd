"""Persisted title -> panel mappings, one entry per dashboard."""

from __future__ import annotations

import json
import logging
from typing import Callable, Dict, List, Optional

from .models import Panel
from .store import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "PANEL_CACHE_"

PanelFetcher = Callable[[str], List[Panel]]


def cache_key(dashboard_key: str) -> str:
    return f"{CACHE_PREFIX}{dashboard_key}"


def build_title_mapping(panels: List[Panel]) -> Dict[str, Panel]:
    """Map each title, and its trimmed form when different, to its panel.

    Later panels overwrite earlier ones that share a title.
    """
    mapping: Dict[str, Panel] = {}
    for panel in panels:
        mapping[panel.title] = panel
        trimmed = panel.title.strip()
        if trimmed != panel.title:
            mapping[trimmed] = panel
    return mapping


def _encode(mapping: Dict[str, Panel]) -> str:
    return json.dumps({title: panel.to_dict() for title, panel in mapping.items()}, ensure_ascii=False)


def _decode(raw: str) -> Optional[Dict[str, Panel]]:
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            return None
        return {str(title): Panel.from_dict(entry) for title, entry in data.items()}
    except (ValueError, KeyError, TypeError, AttributeError):
        return None


class PanelCache:
    """Cache-or-fetch access to per-dashboard panel mappings.

    Entries never expire; they stay until ``refresh`` or ``clear_all``.
    """

    def __init__(self, store: KeyValueStore, fetch_panels: PanelFetcher):
        self.store = store
        self.fetch_panels = fetch_panels

    def get(self, dashboard_key: str) -> Dict[str, Panel]:
        raw = self.store.get(cache_key(dashboard_key))
        if raw:
            mapping = _decode(raw)
            if mapping is not None:
                logger.info("Using cached panels for %s", dashboard_key)
                return mapping
            logger.warning("Discarding unreadable cache entry for %s", dashboard_key)

        logger.info("Cache miss - fetching and caching panels for %s", dashboard_key)
        return self.refresh(dashboard_key)

    def refresh(self, dashboard_key: str) -> Dict[str, Panel]:
        panels = self.fetch_panels(dashboard_key)
        mapping = build_title_mapping(panels)
        try:
            self.store.set(cache_key(dashboard_key), _encode(mapping))
        except OSError as e:
            logger.warning("Could not persist panel cache for %s: %s", dashboard_key, e)
            return mapping
        logger.info("Cached %d panel entries for %s", len(mapping), dashboard_key)
        return mapping

    def clear_all(self) -> int:
        cleared = 0
        for key in self.store.scan_prefix(CACHE_PREFIX):
            if self.store.delete(key):
                cleared += 1
        logger.info("Cleared %d panel caches", cleared)
        return cleared

    def panels(self, dashboard_key: str) -> List[Panel]:
        """Unique panels of one dashboard (trimmed aliases collapsed), sorted by id."""
        unique: Dict[object, Panel] = {}
        for panel in self.get(dashboard_key).values():
            unique[panel.id] = panel
        return sorted(unique.values(), key=lambda p: p.id if isinstance(p.id, int) else 0)
