"""Report generation: match slide titles to panels and drop in rendered charts."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Protocol

from .cache import PanelCache
from .config import DEFAULT_GRAFANA_URL, dashboard_key_for_uid
from .errors import EmptyPresentationError
from .index import UnifiedPanelIndex
from .models import ChartConfig, Dashboard, ReportSummary, SlideFailure, UserInputs
from .slides import extract_slide_title
from .urls import build_dashboard_link, build_render_url
from .validation import validate_user_inputs

logger = logging.getLogger(__name__)

# (slide, title, render_url, dashboard_link, slide_index=...)
SlidePopulator = Callable[..., None]


class Deck(Protocol):
    @property
    def slides(self) -> List[Any]: ...

    def list_text_shapes(self, slide) -> List[str]: ...


class ReportGenerator:
    def __init__(
        self,
        *,
        dashboards: Mapping[str, Dashboard],
        cache: PanelCache,
        deck: Deck,
        populate: SlidePopulator,
        grafana_url: str = DEFAULT_GRAFANA_URL,
    ):
        self.dashboards = dashboards
        self.cache = cache
        self.deck = deck
        self.populate = populate
        self.grafana_url = grafana_url

    def generate(self, inputs: UserInputs) -> ReportSummary:
        """Populate every slide whose title names a known panel.

        Missing tenant and empty decks abort the run. Everything else is
        recorded on the summary: unloadable dashboards, untitled or unmatched
        slides, and per-slide population failures.
        """
        validate_user_inputs(inputs)
        logger.info(
            "Starting report generation: tenant=%s data_source=%s environment=%s interval=%s timeframe=%s",
            inputs.tenant_id,
            inputs.data_source,
            inputs.environment,
            inputs.interval,
            inputs.timeframe,
        )

        slides = self.deck.slides
        if not slides:
            source = getattr(self.deck, "source", None)
            raise EmptyPresentationError(str(source) if source else None)
        logger.info("Presentation has %d slides", len(slides))

        index = UnifiedPanelIndex.build(self.dashboards.keys(), self.cache)
        summary = ReportSummary(
            total_slides=len(slides),
            conflicts=list(index.conflicts),
            failed_dashboards=dict(index.failures),
        )

        for slide_index, slide in enumerate(slides):
            logger.info("Slide %d of %d", slide_index + 1, len(slides))
            title = extract_slide_title(self.deck.list_text_shapes(slide))
            if not title:
                logger.info("No title found, skipping")
                summary.skipped += 1
                continue

            panel = index.lookup(title)
            if panel is None:
                logger.info('No matching panel found for "%s"', title)
                summary.skipped += 1
                continue

            logger.info('Found panel ID %s for "%s" on dashboard %s', panel.id, title, panel.dashboard_uid)
            chart = ChartConfig.for_panel(panel, title)
            render_url = build_render_url(chart, inputs, base_url=self.grafana_url)
            dashboard_link = build_dashboard_link(chart, inputs, base_url=self.grafana_url)

            try:
                self.populate(slide, title, render_url, dashboard_link, slide_index=slide_index)
            except Exception as e:
                logger.warning('Slide %d ("%s") failed: %s', slide_index + 1, title, e)
                summary.errors.append(SlideFailure(slide_index=slide_index, title=title, message=str(e)))
                summary.skipped += 1
                continue

            summary.processed += 1
            usage_key = self._usage_key(panel.dashboard_uid)
            summary.dashboard_usage[usage_key] = summary.dashboard_usage.get(usage_key, 0) + 1

        logger.info("Processed: %d, skipped: %d", summary.processed, summary.skipped)
        return summary

    def _usage_key(self, dashboard_uid: str) -> str:
        return dashboard_key_for_uid(self.dashboards, dashboard_uid) or dashboard_uid
