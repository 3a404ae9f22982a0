"""Placement strategy: assigns shapes to zones.

Pipeline::

    strategy = PlacementStrategy(rules, providers=[CustomPlacement()])
    strategy.place_shapes(layout, shapes)

    1. Each shape, in input order: self-placement, else the rule set,
       else it stays in the remaining list
    2. Providers run in order against the remaining shapes; their
       proposals are applied and those shapes leave the list
    3. Zones are finalized: items ordered, parents linked
    4. Whatever remains is dropped

Dropping is not an error: modules may contribute shapes that a given
theme does not use.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any

from plume.errors import PlacementError
from plume.placement.rules import RuleSet
from plume.placement.types import Placement, PlacementProvider
from plume.placement.zones import ZoneTree
from plume.shapes import Shape

logger = logging.getLogger("plume.placement")

ProviderFunc = Callable[[Shape, tuple[Shape, ...]], Iterable[tuple[Shape, Placement]]]


class PlacementStrategy:
    """Places shapes using declarative rules, then executable providers.

    Immutable once built; one instance serves any number of renders.
    """

    __slots__ = ("_providers", "rules")

    def __init__(
        self,
        rules: RuleSet | None = None,
        providers: Sequence[PlacementProvider | ProviderFunc] = (),
    ) -> None:
        self.rules = rules or RuleSet()
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[PlacementProvider | ProviderFunc, ...]:
        return self._providers

    @classmethod
    def from_directories(
        cls,
        dirs: Iterable[str | Path],
        **kwargs: Any,
    ) -> PlacementStrategy:
        """Build a strategy from the placement sources found in module directories."""
        from plume.placement.discovery import discover_placement_sources

        sources = discover_placement_sources(dirs, **kwargs)
        return cls(RuleSet.from_sources(sources.rules), providers=sources.providers)

    def place_shapes(self, layout: Shape, shapes: Iterable[Shape]) -> Shape:
        """Place *shapes* into zones under *layout*.

        Returns *layout* once every shape is resolved.

        Raises:
            PlacementError: For malformed self-placement, or a provider
                proposing a shape that is not a remaining candidate.
        """
        tree = ZoneTree(layout)
        remaining: list[Shape] = []

        for shape in shapes:
            placement = self._resolve(shape)
            if placement is None:
                remaining.append(shape)
                continue
            tree.place(shape, placement)

        for provider in self._providers:
            if not remaining:
                break
            remaining = self._apply_provider(provider, layout, remaining, tree)

        tree.finalize()

        for shape in remaining:
            logger.debug(
                "Dropping unplaced shape type=%r name=%r", shape.meta.type, shape.meta.name
            )
        return layout

    def _resolve(self, shape: Shape) -> Placement | None:
        if shape.meta.placement is not None:
            return Placement.parse(shape.meta.placement)
        return self.rules.match(shape)

    def _apply_provider(
        self,
        provider: PlacementProvider | ProviderFunc,
        layout: Shape,
        remaining: list[Shape],
        tree: ZoneTree,
    ) -> list[Shape]:
        if isinstance(provider, PlacementProvider):
            proposals = provider.propose_placements(layout, tuple(remaining))
        else:
            proposals = provider(layout, tuple(remaining))

        candidates = {id(shape) for shape in remaining}
        taken: set[int] = set()
        for shape, placement in proposals:
            if id(shape) not in candidates or id(shape) in taken:
                msg = (
                    f"provider {provider!r} proposed shape {shape.meta.type!r} "
                    "which is not a remaining candidate"
                )
                raise PlacementError(msg)
            tree.place(shape, Placement.parse(placement))
            taken.add(id(shape))

        if taken:
            logger.debug("Provider %r placed %d shape(s)", provider, len(taken))
        return [shape for shape in remaining if id(shape) not in taken]
