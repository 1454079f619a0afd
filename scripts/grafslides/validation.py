"""Validation for operator inputs and dashboard registry files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigValidationError, ValidationError
from .models import Dashboard, UserInputs

_DASHBOARD_FIELDS = ("uid", "path", "name")


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_user_inputs(inputs: UserInputs) -> UserInputs:
    """Check the inputs a report run cannot do without."""
    issues: list[str] = []
    if not _is_non_empty_str(inputs.tenant_id):
        issues.append("Tenant ID is required")
    for field_name in ("data_source", "environment", "interval", "timeframe"):
        value = getattr(inputs, field_name)
        if value is not None and not isinstance(value, str):
            issues.append(f"{field_name} must be a string when provided")
    if issues:
        raise ValidationError(issues)
    return inputs


def validate_dashboard_config(payload: Any) -> Tuple[Dict[str, Dashboard], Optional[str]]:
    """Validate a registry payload and return ``(dashboards, default_key)``.

    Dashboards keep the order of the JSON object; that order decides which
    dashboard wins when two of them expose the same panel title.
    """
    if not isinstance(payload, dict):
        raise ConfigValidationError(["Top-level JSON must be an object"])

    issues: list[str] = []
    entries = payload.get("dashboards")
    if not isinstance(entries, dict) or not entries:
        raise ConfigValidationError(["dashboards is required and must be a non-empty object"])

    dashboards: Dict[str, Dashboard] = {}
    seen_uids: Dict[str, str] = {}
    for key, entry in entries.items():
        prefix = f"dashboards.{key}"
        if not _is_non_empty_str(key):
            issues.append("dashboard keys must be non-empty strings")
            continue
        if not isinstance(entry, dict):
            issues.append(f"{prefix} must be an object with uid, path and name")
            continue
        missing = [name for name in _DASHBOARD_FIELDS if not _is_non_empty_str(entry.get(name))]
        if missing:
            issues.append(f"{prefix} is missing required string field(s): {', '.join(missing)}")
            continue
        uid = entry["uid"].strip()
        if uid in seen_uids:
            issues.append(f"{prefix}.uid '{uid}' is already used by dashboards.{seen_uids[uid]}")
            continue
        seen_uids[uid] = key
        dashboards[key] = Dashboard(key=key, uid=uid, path=entry["path"].strip(), name=entry["name"].strip())

    default_key = payload.get("default")
    if default_key is not None:
        if not isinstance(default_key, str):
            issues.append("default must be a string when provided")
        elif default_key not in entries:
            issues.append(f"default '{default_key}' does not name a configured dashboard")

    if issues:
        raise ConfigValidationError(issues)
    return dashboards, default_key


def validate_dashboard_file(path: Path) -> Tuple[Dict[str, Dashboard], Optional[str]]:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigValidationError([f"Dashboard config not found: {path}"]) from e
    except json.JSONDecodeError as e:
        raise ConfigValidationError([f"Invalid JSON in {path}: {e}"]) from e
    return validate_dashboard_config(payload)
