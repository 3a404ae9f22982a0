"""Shape placement: positions shapes into named zones.

Rules come from independently authored sources (declarative
``placement.json`` data and executable ``placement.py`` providers) that
merge without global coordination. Output is deterministic for a fixed
set of shapes and sources.

Usage::

    strategy = PlacementStrategy.from_directories(["modules/core", "modules/blog"])
    layout = Shape(ShapeMeta(type="layout"))
    strategy.place_shapes(layout, shapes)
    layout.temp.zones["content"].temp.items
"""

from plume.placement.discovery import PlacementSources, discover_placement_sources
from plume.placement.rules import PlacementRule, RuleSet
from plume.placement.strategy import PlacementStrategy
from plume.placement.types import AFTER, BEFORE, Placement, PlacementProvider, order_key
from plume.placement.zones import ZONE_TYPE, ZoneTree, new_zone

__all__ = [
    "AFTER",
    "BEFORE",
    "ZONE_TYPE",
    "Placement",
    "PlacementProvider",
    "PlacementRule",
    "PlacementSources",
    "PlacementStrategy",
    "RuleSet",
    "ZoneTree",
    "discover_placement_sources",
    "new_zone",
    "order_key",
]
