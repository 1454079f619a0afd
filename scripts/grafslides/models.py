"""Value objects shared by the panel index, URL builder and report generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Dashboard:
    key: str
    uid: str
    path: str
    name: str


@dataclass(frozen=True)
class Panel:
    """A leaf panel flattened out of a dashboard tree."""

    id: int
    title: str
    type: str
    dashboard_uid: str
    dashboard_path: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "dashboardUid": self.dashboard_uid,
            "dashboardPath": self.dashboard_path,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Panel":
        return cls(
            id=data["id"],
            title=str(data.get("title") or ""),
            type=str(data.get("type") or ""),
            dashboard_uid=str(data["dashboardUid"]),
            dashboard_path=str(data["dashboardPath"]),
        )


@dataclass(frozen=True)
class ChartImage:
    """A rendered panel as returned by the render endpoint."""

    content: bytes
    content_type: str

    @property
    def extension(self) -> str:
        mime = self.content_type.split(";", 1)[0].strip().lower()
        subtype = mime.split("/", 1)[-1]
        return {"jpeg": "jpg", "svg+xml": "svg"}.get(subtype, subtype or "png")


@dataclass(frozen=True)
class ChartConfig:
    dashboard_uid: str
    panel_id: int
    chart_title: str
    dashboard_path: str

    @classmethod
    def for_panel(cls, panel: Panel, chart_title: str) -> "ChartConfig":
        return cls(
            dashboard_uid=panel.dashboard_uid,
            panel_id=panel.id,
            chart_title=chart_title,
            dashboard_path=panel.dashboard_path,
        )


@dataclass(frozen=True)
class UserInputs:
    """Report parameters chosen by the operator.

    Everything except ``tenant_id`` is optional; unknown or missing values fall
    back to the URL builder defaults.
    """

    tenant_id: str
    data_source: Optional[str] = None
    environment: Optional[str] = None
    interval: Optional[str] = None
    timeframe: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserInputs":
        tenant = data.get("tenantId", data.get("tenant_id"))
        return cls(
            tenant_id="" if tenant is None else str(tenant),
            data_source=data.get("data_source"),
            environment=data.get("environment"),
            interval=data.get("interval"),
            timeframe=data.get("timeframe"),
        )


@dataclass(frozen=True)
class PanelConflict:
    """A title offered by more than one dashboard; the earlier dashboard keeps it."""

    title: str
    losing_dashboard_uid: str
    winning_dashboard_uid: str


@dataclass(frozen=True)
class SlideFailure:
    slide_index: int
    title: str
    message: str

    def __str__(self) -> str:
        return f'Slide "{self.title}": {self.message}'


@dataclass
class ReportSummary:
    total_slides: int = 0
    processed: int = 0
    skipped: int = 0
    dashboard_usage: Dict[str, int] = field(default_factory=dict)
    errors: List[SlideFailure] = field(default_factory=list)
    conflicts: List[PanelConflict] = field(default_factory=list)
    failed_dashboards: Dict[str, str] = field(default_factory=dict)

    MAX_ERROR_SAMPLE = 3

    @property
    def error_sample(self) -> List[str]:
        return [str(err) for err in self.errors[: self.MAX_ERROR_SAMPLE]]

    @property
    def additional_errors(self) -> int:
        return max(0, len(self.errors) - self.MAX_ERROR_SAMPLE)

    def format_message(self, dashboards: Mapping[str, Dashboard]) -> str:
        def display_name(key: str) -> str:
            dashboard = dashboards.get(key)
            return dashboard.name if dashboard else key

        if self.processed > 0:
            message = "Report generated successfully!\n\n" f"✓ Updated {self.processed} chart(s)\n"
            usage = "\n  ".join(f"{display_name(key)} ({count})" for key, count in self.dashboard_usage.items())
            message += "\nDashboards used:\n  " + usage
            if self.skipped > 0:
                message += f"\n\n⊗ Skipped {self.skipped} slide(s)"
        else:
            message = (
                "No charts generated!\n\n"
                f"⊗ Skipped {self.skipped} slide(s)\n\n"
                "Make sure slide titles match panel names from your dashboards."
            )

        if self.errors:
            message += "\n\nErrors:\n" + "\n".join(self.error_sample)
            if self.additional_errors:
                message += f"\n... and {self.additional_errors} more"
        return message
