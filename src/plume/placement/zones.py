"""Zone tree construction and intra-zone ordering.

Zones are created lazily the first time a placement path mentions them;
``content/header`` creates (or reuses) ``content`` under the layout, then
``header`` under ``content``.

Shapes are recorded into *slots* while placement runs. A numeric or
unordered placement opens a new slot; ``before``/``after`` joins the slot
of the anchor (the shape most recently placed in that zone) right next
to it. ``finalize()`` sorts slots by numeric key, stable on discovery
order, and flattens them into each zone's ``temp.items``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from plume.errors import PlacementError
from plume.placement.types import BEFORE, Placement
from plume.shapes import Shape, ShapeMeta, ShapeTemp

ZONE_TYPE = "zone"


@dataclass(slots=True)
class _Slot:
    key: tuple[int, ...] | None
    sequence: int
    shapes: list[Shape]

    def sort_key(self) -> tuple[bool, tuple[int, ...], int]:
        return (self.key is None, self.key or (), self.sequence)


@dataclass(slots=True)
class _PendingZone:
    slots: list[_Slot] = field(default_factory=list)
    anchor: Shape | None = None
    anchor_slot: _Slot | None = None


def new_zone(name: str, parent: Shape | None = None) -> Shape:
    """An empty zone shape named *name*."""
    zone = Shape(
        meta=ShapeMeta(type=ZONE_TYPE, name=name),
        temp=ShapeTemp(items=[], zones={}),
    )
    zone.temp.parent = parent
    return zone


class ZoneTree:
    """Places shapes into the zones under one root layout shape.

    Usage::

        tree = ZoneTree(layout)
        tree.place(title, Placement("content/header", "1"))
        tree.place(body, Placement("content", "after"))
        tree.finalize()
    """

    __slots__ = ("_pending", "_placed", "_sequence", "root")

    def __init__(self, root: Shape) -> None:
        self.root = root
        if root.temp.zones is None:
            root.temp.zones = {}
        self._pending: dict[int, tuple[Shape, _PendingZone]] = {}
        self._placed: set[int] = set()
        self._sequence = 0

    def zone(self, path: str | tuple[str, ...]) -> Shape:
        """Resolve *path* from the root, creating missing zones."""
        segments = tuple(s for s in path.split("/") if s) if isinstance(path, str) else path
        if not segments:
            raise PlacementError("zone path is empty")

        container = self.root
        for segment in segments:
            zones = container.temp.zones
            if zones is None:
                zones = container.temp.zones = {}
            zone = zones.get(segment)
            if zone is None:
                zone = zones[segment] = new_zone(segment, parent=container)
            container = zone
        return container

    def place(self, shape: Shape, placement: Placement) -> Shape:
        """Record *shape* in the zone named by *placement*; returns the zone."""
        if id(shape) in self._placed:
            raise PlacementError(f"shape {shape.meta.type or shape.meta.name!r} is already placed")

        zone = self.zone(placement.segments)
        pending = self._pending_for(zone)

        if placement.is_relative and pending.anchor_slot is not None:
            slot = pending.anchor_slot
            index = _index_of(slot.shapes, pending.anchor)
            slot.shapes.insert(index if placement.order == BEFORE else index + 1, shape)
        else:
            slot = _Slot(key=placement.key, sequence=self._next_sequence(), shapes=[shape])
            pending.slots.append(slot)

        pending.anchor = shape
        pending.anchor_slot = slot
        self._placed.add(id(shape))
        return zone

    def finalize(self) -> None:
        """Write the ordered ``temp.items`` and ``temp.parent`` of every touched zone."""
        for zone, pending in self._pending.values():
            ordered = sorted(pending.slots, key=_Slot.sort_key)
            items = [shape for slot in ordered for shape in slot.shapes]
            for shape in items:
                shape.temp.parent = zone
            zone.temp.items = items
        self._pending.clear()

    def _pending_for(self, zone: Shape) -> _PendingZone:
        entry = self._pending.get(id(zone))
        if entry is None:
            pending = _PendingZone()
            # Shapes already in the zone stay, as unordered entries
            for existing in zone.temp.items or ():
                slot = _Slot(key=None, sequence=self._next_sequence(), shapes=[existing])
                pending.slots.append(slot)
                self._placed.add(id(existing))
            entry = self._pending[id(zone)] = (zone, pending)
        return entry[1]

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence


def _index_of(shapes: list[Shape], target: Shape | None) -> int:
    for index, shape in enumerate(shapes):
        if shape is target:
            return index
    return len(shapes) - 1
