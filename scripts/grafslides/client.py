"""Thin Grafana HTTP client for dashboard metadata and rendered panel images."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .errors import ChartRenderError, DashboardFetchError
from .models import ChartImage, Dashboard

logger = logging.getLogger(__name__)

USER_AGENT = "grafana-slides/0.1"


class GrafanaClient:
    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        verify_tls: bool = True,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.verify_tls = verify_tls

    def _headers(self, accept: str) -> Dict[str, str]:
        headers = {"Accept": accept, "User-Agent": USER_AGENT}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def fetch_dashboard(self, dashboard: Dashboard) -> Dict[str, Any]:
        """Return the JSON model of one dashboard."""
        url = f"{self.base_url}/api/dashboards/uid/{dashboard.uid}"
        logger.info("Fetching dashboard %s (uid=%s)", dashboard.name, dashboard.uid)
        logger.debug("GET %s", url)
        headers = self._headers("application/json")
        headers["Content-Type"] = "application/json"
        try:
            resp = self.session.get(url, headers=headers, timeout=self.timeout, verify=self.verify_tls)
        except requests.RequestException as e:
            raise DashboardFetchError(dashboard.key, reason=str(e)) from e

        if resp.status_code != 200:
            raise DashboardFetchError(dashboard.key, http_status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise DashboardFetchError(dashboard.key, reason=f"invalid JSON body: {e}") from e
        if not isinstance(data, dict):
            raise DashboardFetchError(dashboard.key, reason="dashboard response is not a JSON object")
        return data

    def fetch_chart(self, url: str, *, slide_index: Optional[int] = None) -> ChartImage:
        """Download a rendered panel image.

        Grafana answers some render failures with an HTML or JSON error body and
        a 200 status, so anything that is not ``image/*`` is rejected.
        """
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(
                url,
                headers=self._headers("image/png,image/*"),
                timeout=self.timeout,
                verify=self.verify_tls,
            )
        except requests.RequestException as e:
            raise ChartRenderError(reason=f"Chart request failed: {e}", slide_index=slide_index) from e

        logger.debug("Render response: %s", resp.status_code)
        if resp.status_code != 200:
            raise ChartRenderError(http_status=resp.status_code, slide_index=slide_index)

        content_type = (resp.headers.get("Content-Type") or "").lower()
        if not content_type.startswith("image/"):
            raise ChartRenderError(http_status=resp.status_code, content_type=content_type, slide_index=slide_index)

        body = resp.content or b""
        if not body:
            raise ChartRenderError(
                http_status=resp.status_code,
                content_type=content_type or None,
                reason="Grafana returned an empty image",
                slide_index=slide_index,
            )
        logger.debug("Downloaded %.1f KB", len(body) / 1024)
        return ChartImage(content=body, content_type=content_type)
