"""Tests for plume.placement.discovery: placement sources in module directories."""

import json
from pathlib import Path

import pytest

from plume.errors import PlacementRuleError
from plume.placement.discovery import discover_placement_sources
from plume.placement.strategy import PlacementStrategy
from plume.shapes import Shape, ShapeMeta

_PROVIDER = '''\
from plume.placement import Placement


def propose_placements(root, candidates):
    return [(shape, Placement("custom-zone", "before")) for shape in candidates if shape.meta.type == "custom"]
'''


def _module(tmp_path: Path, name: str, rules: dict | None = None, provider: str | None = None) -> Path:
    directory = tmp_path / name
    directory.mkdir()
    if rules is not None:
        (directory / "placement.json").write_text(json.dumps(rules), encoding="utf-8")
    if provider is not None:
        (directory / "placement.py").write_text(provider, encoding="utf-8")
    return directory


class TestDiscovery:
    def test_collects_in_directory_order(self, tmp_path: Path) -> None:
        first = _module(tmp_path, "first", rules={"shape3": {"path": "zone2", "order": "1"}})
        second = _module(tmp_path, "second", rules={"shape3": {"path": "zone1"}}, provider=_PROVIDER)
        sources = discover_placement_sources([first, second])

        assert len(sources.rules) == 2
        assert sources.rules[0].shorthands["shape3"].path == "zone2"
        assert len(sources.providers) == 1
        assert callable(sources.providers[0])

    def test_directory_without_sources(self, tmp_path: Path) -> None:
        sources = discover_placement_sources([_module(tmp_path, "empty")])
        assert sources.rules == ()
        assert sources.providers == ()

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            discover_placement_sources([tmp_path / "nope"])

    def test_custom_file_names(self, tmp_path: Path) -> None:
        directory = tmp_path / "mod"
        directory.mkdir()
        (directory / "zones.json").write_text('{"page": {"path": "content"}}', encoding="utf-8")
        sources = discover_placement_sources([directory], placement_file="zones.json")
        assert len(sources.rules) == 1


class TestLoadErrors:
    def test_invalid_json_names_file(self, tmp_path: Path) -> None:
        directory = tmp_path / "broken"
        directory.mkdir()
        path = directory / "placement.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PlacementRuleError, match="invalid JSON") as exc_info:
            discover_placement_sources([directory])
        assert exc_info.value.source == str(path.resolve())

    def test_malformed_rule(self, tmp_path: Path) -> None:
        directory = _module(tmp_path, "bad", rules={"matches": [{"type": "(", "path": "x"}]})
        with pytest.raises(PlacementRuleError):
            discover_placement_sources([directory])

    def test_module_without_function(self, tmp_path: Path) -> None:
        directory = _module(tmp_path, "noop", provider="VALUE = 1\n")
        with pytest.raises(PlacementRuleError, match="propose_placements"):
            discover_placement_sources([directory])


class TestFromDirectories:
    def test_strategy_uses_discovered_sources(self, tmp_path: Path) -> None:
        first = _module(tmp_path, "first", rules={"shape3": {"path": "zone2"}})
        second = _module(tmp_path, "second", rules={"shape3": {"path": "zone1"}}, provider=_PROVIDER)
        strategy = PlacementStrategy.from_directories([first, second])

        layout = Shape(ShapeMeta(type="layout"))
        shape3 = Shape(ShapeMeta(type="shape3"))
        custom = Shape(ShapeMeta(type="custom"))
        strategy.place_shapes(layout, [shape3, custom])

        assert layout.temp.zones["zone2"].temp.items == [shape3]
        assert layout.temp.zones["custom-zone"].temp.items == [custom]
        assert "zone1" not in layout.temp.zones
