from __future__ import annotations

import sys
from pathlib import Path

import pytest
import requests

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from fakes import FakeResponse, FakeSession, png_bytes  # noqa: E402
from grafslides import DEFAULT_DASHBOARDS, ChartRenderError, DashboardFetchError, GrafanaClient  # noqa: E402

RENDER_URL = "https://grafana.test/render/d-solo/LUq13bv4z/api-health-overall-view?orgId=1&panelId=27"


def test_fetch_chart_returns_image_bytes() -> None:
    image = png_bytes()
    session = FakeSession(lambda url: FakeResponse(200, content=image, headers={"Content-Type": "image/png"}))
    client = GrafanaClient("https://grafana.test", "secret", session=session, timeout=5, verify_tls=False)

    chart = client.fetch_chart(RENDER_URL)

    assert chart.content == image
    assert chart.content_type == "image/png"
    assert chart.extension == "png"
    call = session.calls[0]
    assert call["headers"]["Authorization"] == "Bearer secret"
    assert call["timeout"] == 5
    assert call["verify"] is False


def test_fetch_chart_omits_auth_header_without_api_key() -> None:
    session = FakeSession(lambda url: FakeResponse(200, content=png_bytes(), headers={"Content-Type": "image/png"}))
    GrafanaClient("https://grafana.test", None, session=session).fetch_chart(RENDER_URL)

    assert "Authorization" not in session.calls[0]["headers"]


def test_fetch_chart_rejects_error_status() -> None:
    session = FakeSession(lambda url: FakeResponse(500, content=b"boom"))
    client = GrafanaClient("https://grafana.test", session=session)

    with pytest.raises(ChartRenderError) as exc:
        client.fetch_chart(RENDER_URL, slide_index=4)

    assert exc.value.http_status == 500
    assert exc.value.slide_index == 4
    assert str(exc.value) == "Grafana returned error code 500"


def test_fetch_chart_rejects_html_error_page_with_200_status() -> None:
    session = FakeSession(
        lambda url: FakeResponse(200, content=b"<html>login</html>", headers={"Content-Type": "text/html; charset=UTF-8"})
    )
    client = GrafanaClient("https://grafana.test", session=session)

    with pytest.raises(ChartRenderError) as exc:
        client.fetch_chart(RENDER_URL)

    assert exc.value.http_status == 200
    assert exc.value.content_type.startswith("text/html")


def test_fetch_chart_rejects_json_error_body_with_200_status() -> None:
    session = FakeSession(
        lambda url: FakeResponse(200, json_data={"message": "Rendering failed"}, headers={"Content-Type": "application/json"})
    )
    client = GrafanaClient("https://grafana.test", session=session)

    with pytest.raises(ChartRenderError) as exc:
        client.fetch_chart(RENDER_URL, slide_index=1)

    assert exc.value.http_status == 200
    assert exc.value.content_type.startswith("application/json")
    assert exc.value.slide_index == 1
    assert str(exc.value) == "Grafana returned application/json instead of an image"


def test_fetch_chart_wraps_transport_errors() -> None:
    def responder(url: str) -> FakeResponse:
        raise requests.ConnectionError("connection refused")

    client = GrafanaClient("https://grafana.test", session=FakeSession(responder))

    with pytest.raises(ChartRenderError) as exc:
        client.fetch_chart(RENDER_URL)

    assert exc.value.http_status is None
    assert "connection refused" in str(exc.value)


def test_fetch_dashboard_rejects_non_json_body() -> None:
    session = FakeSession(lambda url: FakeResponse(200, content=b"<html></html>"))
    client = GrafanaClient("https://grafana.test", session=session)

    with pytest.raises(DashboardFetchError) as exc:
        client.fetch_dashboard(DEFAULT_DASHBOARDS["api-health"])

    assert exc.value.http_status is None
    assert exc.value.dashboard_key == "api-health"
