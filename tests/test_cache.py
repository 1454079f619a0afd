from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import List

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from grafslides import JsonFileStore, MemoryStore, Panel, PanelCache  # noqa: E402
from grafslides.cache import build_title_mapping, cache_key  # noqa: E402


def _panel(panel_id: int, title: str, uid: str = "LUq13bv4z") -> Panel:
    return Panel(id=panel_id, title=title, type="timeseries", dashboard_uid=uid, dashboard_path="api-health-overall-view")


class CountingFetcher:
    def __init__(self, panels: List[Panel]):
        self.panels = panels
        self.calls: List[str] = []

    def __call__(self, dashboard_key: str) -> List[Panel]:
        self.calls.append(dashboard_key)
        return list(self.panels)


def test_title_mapping_registers_trimmed_alias_and_last_write_wins() -> None:
    first = _panel(1, "Latency")
    padded = _panel(2, "  Error Rate ")
    second = _panel(3, "Latency")

    mapping = build_title_mapping([first, padded, second])

    assert mapping["Latency"] is second
    assert mapping["  Error Rate "] is padded
    assert mapping["Error Rate"] is padded
    assert len(mapping) == 3


def test_get_caches_on_miss_and_serves_hits_without_fetching() -> None:
    store = MemoryStore()
    fetcher = CountingFetcher([_panel(27, "API Overall Volume")])
    cache = PanelCache(store, fetcher)

    first = cache.get("api-health")
    second = cache.get("api-health")

    assert fetcher.calls == ["api-health"]
    assert first == second
    assert second["API Overall Volume"].id == 27
    assert store.scan_prefix("PANEL_CACHE_") == ["PANEL_CACHE_api-health"]


def test_refresh_always_refetches_and_overwrites() -> None:
    store = MemoryStore()
    fetcher = CountingFetcher([_panel(1, "Old")])
    cache = PanelCache(store, fetcher)
    cache.get("api-health")

    fetcher.panels = [_panel(2, "New")]
    mapping = cache.refresh("api-health")

    assert fetcher.calls == ["api-health", "api-health"]
    assert list(mapping) == ["New"]
    assert list(cache.get("api-health")) == ["New"]


def test_clear_all_removes_only_panel_entries() -> None:
    store = MemoryStore({"OTHER_SETTING": "keep"})
    cache = PanelCache(store, CountingFetcher([_panel(1, "A")]))
    cache.get("api-health")
    cache.get("api-breakdown")

    assert cache.clear_all() == 2
    assert store.scan_prefix("PANEL_CACHE_") == []
    assert store.get("OTHER_SETTING") == "keep"
    assert cache.clear_all() == 0


def test_unreadable_cache_entry_is_refetched() -> None:
    store = MemoryStore({cache_key("api-health"): "{not json"})
    fetcher = CountingFetcher([_panel(5, "Volume")])
    cache = PanelCache(store, fetcher)

    mapping = cache.get("api-health")

    assert fetcher.calls == ["api-health"]
    assert mapping["Volume"].id == 5


def test_panels_collapses_trimmed_aliases_and_sorts_by_id() -> None:
    cache = PanelCache(MemoryStore(), CountingFetcher([_panel(9, "Nine "), _panel(3, "Three")]))

    panels = cache.panels("api-health")

    assert [p.id for p in panels] == [3, 9]


def test_json_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cache.json"
    cache = PanelCache(JsonFileStore(path), CountingFetcher([_panel(27, "API Overall Volume")]))
    cache.get("api-health")

    fetcher = CountingFetcher([])
    reopened = PanelCache(JsonFileStore(path), fetcher)
    mapping = reopened.get("api-health")

    assert fetcher.calls == []
    assert mapping["API Overall Volume"].dashboard_uid == "LUq13bv4z"
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    stored = json.loads(on_disk["PANEL_CACHE_api-health"])
    assert stored["API Overall Volume"] == {
        "id": 27,
        "title": "API Overall Volume",
        "type": "timeseries",
        "dashboardUid": "LUq13bv4z",
        "dashboardPath": "api-health-overall-view",
    }


def test_json_file_store_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "cache.json"
    path.write_text("not json at all", encoding="utf-8")
    store = JsonFileStore(path)

    assert store.get("PANEL_CACHE_api-health") is None
    store.set("PANEL_CACHE_api-health", "{}")
    assert store.scan_prefix("PANEL_CACHE_") == ["PANEL_CACHE_api-health"]
    assert store.delete("PANEL_CACHE_api-health") is True
    assert store.delete("PANEL_CACHE_api-health") is False


class ReadOnlyStore(MemoryStore):
    def set(self, key: str, value: str) -> None:
        raise PermissionError(13, "Permission denied", "cache.json")


def test_refresh_returns_mapping_when_store_write_fails() -> None:
    fetcher = CountingFetcher([_panel(27, "API Overall Volume")])
    cache = PanelCache(ReadOnlyStore(), fetcher)

    mapping = cache.get("api-health")

    assert mapping["API Overall Volume"].id == 27
    assert cache.store.scan_prefix("PANEL_CACHE_") == []
    cache.get("api-health")
    assert fetcher.calls == ["api-health", "api-health"]
