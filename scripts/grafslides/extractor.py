"""Flatten a Grafana dashboard panel tree into its leaf panels."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, List, Mapping, Protocol, Tuple

from .config import get_dashboard
from .models import Dashboard, Panel

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


class DashboardSource(Protocol):
    def fetch_dashboard(self, dashboard: Dashboard) -> Mapping[str, Any]: ...


def _children(node: Mapping[str, Any]) -> List[Any]:
    nested = node.get("panels")
    return nested if isinstance(nested, list) else []


def extract_panels(nodes: Iterable[Any], dashboard: Dashboard) -> List[Panel]:
    """Return leaf panels in depth-first pre-order.

    Rows (collapsed or not) never appear in the result; their nested panels
    do, at any depth. Walks with an explicit stack instead of recursion.
    """
    panels: List[Panel] = []
    stack: List[Tuple[Iterator[Any], int]] = [(iter(nodes or []), 0)]

    while stack:
        siblings, depth = stack[-1]
        node = next(siblings, _EXHAUSTED)
        if node is _EXHAUSTED:
            stack.pop()
            continue
        if not isinstance(node, Mapping):
            continue

        indent = "  " * depth
        if node.get("type") == "row":
            children = _children(node)
            logger.debug('%sRow: "%s" (%d nested panels)', indent, node.get("title"), len(children))
            if children:
                stack.append((iter(children), depth + 1))
            continue

        panel = Panel(
            id=node.get("id"),
            title=str(node.get("title") or ""),
            type=str(node.get("type") or ""),
            dashboard_uid=dashboard.uid,
            dashboard_path=dashboard.path,
        )
        logger.debug('%sPanel: ID=%s "%s"', indent, panel.id, panel.title)
        panels.append(panel)

    return panels


def fetch_dashboard_panels(
    dashboard_key: str,
    *,
    dashboards: Mapping[str, Dashboard],
    source: DashboardSource,
) -> List[Panel]:
    """Fetch one configured dashboard and flatten its panels.

    Raises ``DashboardNotFoundError`` for an unknown key and lets the source's
    ``DashboardFetchError`` propagate.
    """
    dashboard = get_dashboard(dashboards, dashboard_key)
    payload = source.fetch_dashboard(dashboard)
    model = payload.get("dashboard") or {}
    nodes = model.get("panels") if isinstance(model, Mapping) else None
    panels = extract_panels(nodes if isinstance(nodes, list) else [], dashboard)
    logger.info("Total panels extracted from %s: %d", dashboard.name, len(panels))
    return panels
