"""Merge per-dashboard panel caches into one title lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .cache import PanelCache
from .errors import DashboardFetchError, DashboardNotFoundError
from .models import Panel, PanelConflict

logger = logging.getLogger(__name__)


@dataclass
class UnifiedPanelIndex:
    panels: Dict[str, Panel] = field(default_factory=dict)
    conflicts: List[PanelConflict] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, dashboard_keys: Iterable[str], cache: PanelCache) -> "UnifiedPanelIndex":
        """Merge dashboards in the given order; the first dashboard to offer a title keeps it.

        A dashboard that cannot be loaded is recorded in ``failures`` and
        contributes nothing.
        """
        index = cls()
        keys = list(dashboard_keys)
        for dashboard_key in keys:
            logger.info("Loading panels from %s", dashboard_key)
            try:
                mapping = cache.get(dashboard_key)
            except (DashboardNotFoundError, DashboardFetchError) as e:
                logger.warning("Error loading dashboard %s: %s", dashboard_key, e)
                index.failures[dashboard_key] = str(e)
                continue
            index.merge(mapping)

        logger.info("Loaded %d unique panels from %d dashboards", len(index.panels), len(keys))
        return index

    def merge(self, mapping: Dict[str, Panel]) -> None:
        for title, panel in mapping.items():
            existing = self.panels.get(title)
            if existing is None:
                self.panels[title] = panel
                continue
            if existing.dashboard_uid == panel.dashboard_uid:
                continue
            logger.warning(
                'Conflict: "%s" exists in multiple dashboards; using first occurrence from %s',
                title,
                existing.dashboard_uid,
            )
            self.conflicts.append(
                PanelConflict(
                    title=title,
                    losing_dashboard_uid=panel.dashboard_uid,
                    winning_dashboard_uid=existing.dashboard_uid,
                )
            )

    def lookup(self, title: str) -> Optional[Panel]:
        """Exact title first, then its trimmed form."""
        panel = self.panels.get(title)
        if panel is not None:
            return panel
        return self.panels.get(title.strip())

    def __len__(self) -> int:
        return len(self.panels)

    def __contains__(self, title: object) -> bool:
        return title in self.panels
