"""Placement source discovery across module directories.

Each module directory may contribute:

- ``placement.json``: a declarative rule source
- ``placement.py``: a module exporting ``propose_placements(root, candidates)``

Directories are searched in the order given; that order is the
precedence order of their rules.
"""

from __future__ import annotations

import importlib.util
import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from plume.errors import PlacementRuleError
from plume.placement.rules import RuleSet
from plume.placement.strategy import ProviderFunc

PROVIDER_FUNCTION = "propose_placements"


@dataclass(frozen=True, slots=True)
class PlacementSources:
    """Discovered sources, in discovery order."""

    rules: tuple[RuleSet, ...] = ()
    providers: tuple[ProviderFunc, ...] = ()


def discover_placement_sources(
    dirs: Iterable[str | Path],
    *,
    placement_file: str = "placement.json",
    placement_module: str = "placement.py",
) -> PlacementSources:
    """Collect placement sources from module directories.

    Raises:
        FileNotFoundError: If a directory does not exist.
        PlacementRuleError: For unreadable JSON, malformed rules, or a
            placement module without ``propose_placements``.
    """
    rules: list[RuleSet] = []
    providers: list[ProviderFunc] = []

    for index, directory in enumerate(dirs):
        root = Path(directory).resolve()
        if not root.is_dir():
            raise FileNotFoundError(f"Module directory not found: {root}")

        json_file = root / placement_file
        if json_file.is_file():
            rules.append(_load_rule_file(json_file))

        module_file = root / placement_module
        if module_file.is_file():
            providers.append(_load_provider(module_file, index))

    return PlacementSources(rules=tuple(rules), providers=tuple(providers))


def _load_rule_file(path: Path) -> RuleSet:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PlacementRuleError(f"invalid JSON: {exc}", str(path)) from exc
    return RuleSet.from_source(raw, name=str(path))


def _load_provider(path: Path, index: int) -> ProviderFunc:
    spec = importlib.util.spec_from_file_location(f"_plume_placement_{index}", path)
    if spec is None or spec.loader is None:
        raise PlacementRuleError("cannot import placement module", str(path))

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    func = getattr(module, PROVIDER_FUNCTION, None)
    if func is None or not callable(func):
        raise PlacementRuleError(f"module does not define {PROVIDER_FUNCTION}()", str(path))
    return func
