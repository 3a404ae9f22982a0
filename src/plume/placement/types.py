"""Placement targets, order keys and placement providers.

A ``Placement`` says where a shape goes: a ``/``-delimited zone path and
an order. Orders are either dotted numeric keys compared segment by
segment (``"2.0" < "2.1" < "3"``) or the relative tokens ``before`` and
``after``, which attach a shape next to the most recently placed shape
in the same zone.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from plume.errors import PlacementError

if TYPE_CHECKING:
    from plume.shapes import Shape

BEFORE = "before"
AFTER = "after"
RELATIVE_ORDERS = frozenset({BEFORE, AFTER})


@dataclass(frozen=True, slots=True)
class Placement:
    """Where a shape goes.

    Attributes:
        path: Zone path, e.g. ``"content/header"``.
        order: ``None``, a dotted numeric key, ``"before"`` or ``"after"``.
    """

    path: str
    order: str | None = None

    @property
    def is_relative(self) -> bool:
        return self.order in RELATIVE_ORDERS

    @property
    def key(self) -> tuple[int, ...] | None:
        """Numeric sort key, or ``None`` for relative and unordered placements."""
        if self.order is None or self.is_relative:
            return None
        return order_key(self.order)

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(s for s in self.path.split("/") if s)

    @classmethod
    def parse(cls, value: Any) -> Placement:
        """Build a placement from its shorthand forms.

        Accepts ``"zone/path:order"`` (order optional), a ``{path, order}``
        mapping, or an existing ``Placement``.
        """
        if isinstance(value, Placement):
            placement = value
        elif isinstance(value, str):
            path, sep, order = value.partition(":")
            order = order.strip()
            placement = cls(path=path.strip(), order=order or None)
        elif isinstance(value, Mapping):
            path = value.get("path")
            if not isinstance(path, str):
                raise PlacementError(f"placement needs a string 'path', got {value!r}")
            order = value.get("order")
            placement = cls(path=path, order=None if order is None else str(order))
        else:
            raise PlacementError(f"cannot interpret {value!r} as a placement")

        if not placement.segments:
            raise PlacementError(f"placement {value!r} has an empty zone path")
        if placement.order is not None and not placement.is_relative:
            order_key(placement.order)
        return placement


def order_key(order: str) -> tuple[int, ...]:
    """Turn a dotted order into a tuple compared segment by segment.

    >>> order_key("2.10") > order_key("2.9")
    True
    """
    try:
        return tuple(int(segment) for segment in order.split("."))
    except ValueError:
        msg = f"order {order!r} is neither a dotted number nor 'before'/'after'"
        raise PlacementError(msg) from None


@runtime_checkable
class PlacementProvider(Protocol):
    """Executable placement source.

    Runs after declarative rules against the shapes nothing has placed
    yet. Returns the placements it wants applied; the strategy applies
    them and removes those shapes from the remaining list.
    """

    def propose_placements(
        self,
        root: Shape,
        candidates: tuple[Shape, ...],
    ) -> Iterable[tuple[Shape, Placement]]: ...
