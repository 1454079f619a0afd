from __future__ import annotations

import sys
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from fakes import FakeResponse, FakeSession, dashboard_payload  # noqa: E402
from grafslides import (  # noqa: E402
    DEFAULT_DASHBOARDS,
    DashboardFetchError,
    DashboardNotFoundError,
    GrafanaClient,
    extract_panels,
    fetch_dashboard_panels,
)

HEALTH = DEFAULT_DASHBOARDS["api-health"]


def _leaf(panel_id: int, title: str) -> dict:
    return {"id": panel_id, "title": title, "type": "timeseries"}


def test_extract_flattens_nested_rows_in_pre_order() -> None:
    tree = [
        _leaf(1, "Top"),
        {
            "type": "row",
            "title": "Level 1",
            "panels": [
                _leaf(2, "A"),
                {
                    "type": "row",
                    "title": "Level 2",
                    "panels": [
                        {"type": "row", "title": "Level 3", "panels": [_leaf(3, "Deep")]},
                        _leaf(4, "B"),
                    ],
                },
                _leaf(5, "C"),
            ],
        },
        _leaf(6, "Bottom"),
    ]

    panels = extract_panels(tree, HEALTH)

    assert [p.id for p in panels] == [1, 2, 3, 4, 5, 6]
    assert all(p.type != "row" for p in panels)
    assert {p.dashboard_uid for p in panels} == {"LUq13bv4z"}
    assert {p.dashboard_path for p in panels} == {"api-health-overall-view"}


def test_extract_handles_empty_input_and_childless_rows() -> None:
    assert extract_panels([], HEALTH) == []
    assert extract_panels([{"type": "row", "title": "Empty"}], HEALTH) == []
    assert extract_panels([{"type": "row", "title": "Empty", "panels": []}], HEALTH) == []


def test_extract_supports_very_deep_trees() -> None:
    node: dict = _leaf(99, "Bottom of the well")
    for depth in range(3000):
        node = {"type": "row", "title": f"Row {depth}", "panels": [node]}

    panels = extract_panels([node], HEALTH)

    assert [(p.id, p.title) for p in panels] == [(99, "Bottom of the well")]


def test_fetch_dashboard_panels_rejects_unknown_key() -> None:
    session = FakeSession(lambda url: FakeResponse(200, json_data=dashboard_payload([])))
    client = GrafanaClient("https://grafana.test", "token", session=session)

    with pytest.raises(DashboardNotFoundError) as exc:
        fetch_dashboard_panels("nope", dashboards=DEFAULT_DASHBOARDS, source=client)

    assert exc.value.dashboard_key == "nope"
    assert session.calls == []


def test_fetch_dashboard_panels_reads_api_payload() -> None:
    payload = dashboard_payload([{"type": "row", "title": "Overview", "panels": [_leaf(27, "API Overall Volume")]}])
    session = FakeSession(lambda url: FakeResponse(200, json_data=payload))
    client = GrafanaClient("https://grafana.test/", "token", session=session)

    panels = fetch_dashboard_panels("api-health", dashboards=DEFAULT_DASHBOARDS, source=client)

    assert [(p.id, p.title) for p in panels] == [(27, "API Overall Volume")]
    assert session.calls[0]["url"] == "https://grafana.test/api/dashboards/uid/LUq13bv4z"
    assert session.calls[0]["headers"]["Authorization"] == "Bearer token"


def test_fetch_dashboard_panels_surfaces_http_status() -> None:
    session = FakeSession(lambda url: FakeResponse(403, content=b"forbidden"))
    client = GrafanaClient("https://grafana.test", "token", session=session)

    with pytest.raises(DashboardFetchError) as exc:
        fetch_dashboard_panels("api-breakdown", dashboards=DEFAULT_DASHBOARDS, source=client)

    assert exc.value.dashboard_key == "api-breakdown"
    assert exc.value.http_status == 403
    assert "403" in str(exc.value)
