"""Build Grafana render and dashboard URLs for one panel.

Both builders derive the same template variables from the operator inputs.
Display names that are missing or unknown fall back to the defaults below,
never to an error. Parameter order is fixed so identical inputs always
produce identical URL text.
"""

from __future__ import annotations

import urllib.parse
from typing import Dict, Mapping, Optional

from .config import DEFAULT_GRAFANA_URL
from .models import ChartConfig, UserInputs

DATA_SOURCES: Dict[str, str] = {
    "Pilot Telemetry(A1-Prod)": "Pinot Telemetry (US-Prod)",
    "Pilot Telemetry(A1-Sbx)": "Pinot Telemetry (US-Sbx)",
    "Pilot Telemetry(EU-Prod)": "Pinot Telemetry (EU-Prod)",
    "Pilot Telemetry(US-Prod)": "Pinot Telemetry (US-Prod)",
}

ENVIRONMENTS: Dict[str, str] = {
    "US Production": "prod02",
    "NA Production": "prod01",
    "US Sandbox": "sbx02",
    "NA Sandbox": "sbx01",
    "NA Central Sandbox": "sbxcentral",
}

INTERVALS: Dict[str, str] = {
    "1 day": "day",
    "1 minute": "minute",
    "1 hour": "hour",
}

TIMEFRAMES: Dict[str, str] = {
    "Last 1 Hour": "now-1h",
    "Last 24 Hours": "now-24h",
    "Last 7 Days": "now-7d",
    "Last 30 Days": "now-30d",
}

DEFAULT_DATA_SOURCE = "Pinot Telemetry (US-Prod)"
DEFAULT_ENVIRONMENT = "prod02"
DEFAULT_INTERVAL = "day"
DEFAULT_TIMEFRAME = "now-24h"

# Fixed dashboard variables the panels expect; not exposed to operators.
ENTITY_ID = "11e64eef-ad7b-6780-9658-00259058c29c"
GFW_TIME_RANGE_FROM = "1.761966092427e+12"
ENTITY_ID_MAPPING_TABLE = "restapi_entity_id_mapping"

RENDER_WIDTH = "1000"
RENDER_HEIGHT = "500"
RENDER_TZ = "UTC"

# Same character set encodeURIComponent leaves untouched.
_SAFE_CHARS = "!*'()"


def _lookup(table: Mapping[str, str], value: Optional[str], default: str) -> str:
    if not value:
        return default
    return table.get(value, default)


def _template_params(chart: ChartConfig, inputs: UserInputs, panel_param: str) -> Dict[str, str]:
    return {
        "orgId": "1",
        panel_param: str(chart.panel_id),
        "from": _lookup(TIMEFRAMES, inputs.timeframe, DEFAULT_TIMEFRAME),
        "to": "now",
        "var-data_source": _lookup(DATA_SOURCES, inputs.data_source, DEFAULT_DATA_SOURCE),
        "var-environment": _lookup(ENVIRONMENTS, inputs.environment, DEFAULT_ENVIRONMENT),
        "var-tenant_id": inputs.tenant_id or "",
        "var-entity_id": ENTITY_ID,
        "var-API": "All",
        "var-ZuoraResponseCode": "All",
        "var-HttpStatus": "All",
        "var-Client_twosinglequote": "All",
        "var-Client_query_string": "",
        "var-GFW_Bucket": "All",
        "var-interval": _lookup(INTERVALS, inputs.interval, DEFAULT_INTERVAL),
        "var-gfw_time_range_from": GFW_TIME_RANGE_FROM,
        "var-restapi_entity_id_mapping_table": ENTITY_ID_MAPPING_TABLE,
    }


def encode_query(params: Mapping[str, str]) -> str:
    """Join non-empty parameters as ``key=value`` pairs in insertion order."""
    return "&".join(
        f"{key}={urllib.parse.quote(str(value), safe=_SAFE_CHARS)}" for key, value in params.items() if value != ""
    )


def build_render_url(chart: ChartConfig, inputs: UserInputs, *, base_url: str = DEFAULT_GRAFANA_URL) -> str:
    """Image-producing ``render/d-solo`` URL for one panel."""
    params = _template_params(chart, inputs, "panelId")
    params["width"] = RENDER_WIDTH
    params["height"] = RENDER_HEIGHT
    params["tz"] = RENDER_TZ
    base = f"{base_url.rstrip('/')}/render/d-solo/{chart.dashboard_uid}/{chart.dashboard_path}"
    return f"{base}?{encode_query(params)}"


def build_dashboard_link(chart: ChartConfig, inputs: UserInputs, *, base_url: str = DEFAULT_GRAFANA_URL) -> str:
    """Interactive dashboard URL focused on the same panel."""
    params = _template_params(chart, inputs, "viewPanel")
    base = f"{base_url.rstrip('/')}/d/{chart.dashboard_uid}/{chart.dashboard_path}"
    return f"{base}?{encode_query(params)}"
