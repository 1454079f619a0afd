"""Custom exceptions for chart-report runtime and configuration errors."""

from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Raised when user inputs are missing or invalid for a report run."""

    headline = "Input validation failed"

    def __init__(self, issues: list[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid input"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [f"{self.headline}:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class ConfigValidationError(ValidationError):
    """Raised when a dashboard registry file is invalid."""

    headline = "Configuration validation failed"


class GrafslidesError(RuntimeError):
    """Base class for runtime failures talking to the dashboard service or deck."""


class DashboardNotFoundError(GrafslidesError):
    def __init__(self, dashboard_key: str):
        self.dashboard_key = dashboard_key
        super().__init__(f"Dashboard not found: {dashboard_key}")


class DashboardFetchError(GrafslidesError):
    def __init__(self, dashboard_key: str, *, http_status: Optional[int] = None, reason: str = ""):
        self.dashboard_key = dashboard_key
        self.http_status = http_status
        self.reason = reason
        if http_status is not None:
            detail = f"Grafana API returned error code: {http_status}"
        else:
            detail = reason or "request failed"
        super().__init__(f"Failed to fetch dashboard panels for '{dashboard_key}': {detail}")


class ChartRenderError(GrafslidesError):
    """The render backend answered with an error status or a non-image body."""

    def __init__(
        self,
        *,
        http_status: Optional[int] = None,
        content_type: Optional[str] = None,
        reason: str = "",
        slide_index: Optional[int] = None,
    ):
        self.http_status = http_status
        self.content_type = content_type
        self.reason = reason
        self.slide_index = slide_index
        if reason:
            detail = reason
        elif http_status is not None and http_status != 200:
            detail = f"Grafana returned error code {http_status}"
        elif content_type:
            detail = f"Grafana returned {content_type} instead of an image"
        else:
            detail = "chart render failed"
        super().__init__(detail)


class EmptyPresentationError(GrafslidesError):
    def __init__(self, presentation: Optional[str] = None):
        self.presentation = presentation
        where = f" in {presentation}" if presentation else " in presentation"
        super().__init__(f"No slides found{where}")
