"""Dashboard registry and Grafana connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional, Tuple

from .errors import DashboardNotFoundError
from .models import Dashboard
from .validation import validate_dashboard_file

DEFAULT_GRAFANA_URL = "https://telemetry-metrics.eks22.uw2.prod.auw2.zuora.com"
DEFAULT_CACHE_PATH = Path("~/.cache/grafslides/panel_cache.json")
DEFAULT_TIMEOUT_SECONDS = 30.0

# Iteration order is conflict precedence: earlier dashboards keep shared titles.
DEFAULT_DASHBOARDS: Dict[str, Dashboard] = {
    "api-health": Dashboard(
        key="api-health",
        uid="LUq13bv4z",
        path="api-health-overall-view",
        name="API Health Overall View",
    ),
    "api-breakdown": Dashboard(
        key="api-breakdown",
        uid="oHuq00DVz",
        path="api-health-breakdown-view",
        name="API Health Breakdown View",
    ),
}

DEFAULT_DASHBOARD_KEY = "api-health"


def get_dashboard(dashboards: Mapping[str, Dashboard], dashboard_key: str) -> Dashboard:
    dashboard = dashboards.get(dashboard_key)
    if dashboard is None:
        raise DashboardNotFoundError(dashboard_key)
    return dashboard


def dashboard_key_for_uid(dashboards: Mapping[str, Dashboard], uid: str) -> Optional[str]:
    for key, dashboard in dashboards.items():
        if dashboard.uid == uid:
            return key
    return None


def load_dashboards(path: Optional[Path] = None) -> Tuple[Dict[str, Dashboard], str]:
    """Return ``(dashboards, default_key)`` from a registry file or the built-in set."""
    if path is None:
        return dict(DEFAULT_DASHBOARDS), DEFAULT_DASHBOARD_KEY
    dashboards, default_key = validate_dashboard_file(path)
    return dashboards, default_key or next(iter(dashboards))


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


@dataclass(frozen=True)
class GrafanaSettings:
    base_url: str = DEFAULT_GRAFANA_URL
    api_key: Optional[str] = None
    cache_path: Path = DEFAULT_CACHE_PATH
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    verify_tls: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GrafanaSettings":
        env = os.environ if environ is None else environ
        timeout_raw = (env.get("GRAFANA_TIMEOUT") or "").strip()
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_SECONDS
        except ValueError:
            timeout = DEFAULT_TIMEOUT_SECONDS
        cache_raw = (env.get("GRAFSLIDES_CACHE_PATH") or "").strip()
        return cls(
            base_url=(env.get("GRAFANA_URL") or DEFAULT_GRAFANA_URL).strip().rstrip("/"),
            api_key=(env.get("GRAFANA_API_KEY") or "").strip() or None,
            cache_path=Path(cache_raw) if cache_raw else DEFAULT_CACHE_PATH,
            timeout=timeout,
            verify_tls=_env_flag(env.get("GRAFANA_VERIFY_TLS"), True),
        )


def read_env_file(env_path: Path) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines; blank lines and ``#`` comments are ignored."""
    try:
        content = env_path.read_text(encoding="utf-8")
    except OSError:
        return {}

    values: Dict[str, str] = {}
    for line in content.splitlines():
        key, sep, value = line.strip().partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
            value = value[1:-1]
        values[key] = value
    return values


def load_default_env_files(
    *,
    explicit_env_file: Optional[str] = None,
    environ: Optional[MutableMapping[str, str]] = None,
) -> None:
    """Load the repo, working-directory and explicit ``.env`` files, in that order.

    Variables set before the call are never overridden; later files win over
    earlier ones for everything else.
    """
    env = os.environ if environ is None else environ
    locked_keys = set(env.keys())
    candidates = [Path(__file__).resolve().parents[2] / ".env", Path.cwd() / ".env"]
    if explicit_env_file:
        candidates.append(Path(explicit_env_file).expanduser().resolve())

    for env_path in candidates:
        for key, value in read_env_file(env_path).items():
            if key not in locked_keys:
                env[key] = value
