"""Shapes: the view-model unit every other component consumes.

A shape is metadata plus arbitrary display data. Part loaders build
them, the placement strategy positions them into zones, and the render
stream turns them into markup. Shapes carry no behavior of their own.

Shapes compare by identity: two shapes with equal fields are still
different placements.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Returned by ``lookup`` when a path segment is absent.
MISSING: Final = _Missing()

# camelCase names accepted in dict input and path descriptors
_ALIASES: Final = {"displayType": "display_type"}


@dataclass(slots=True, eq=False)
class ShapeMeta:
    """Identity of a shape: what it is and where it wants to go.

    Attributes:
        type: Shape type, matched by placement rules and used as a
            template name.
        name: Optional name, matched by name shorthand rules.
        alternates: Fallback template names, most specific first.
        placement: Self-placement override (``"zone:order"`` string,
            ``{path, order}`` mapping, or ``Placement``).
        item: The content item the shape was built from.
    """

    type: str | None = None
    name: str | None = None
    alternates: list[str] = field(default_factory=list)
    placement: Any = None
    item: Any = None


@dataclass(slots=True, eq=False)
class ShapeTemp:
    """Render-scoped data. Rebuilt on every placement, never persisted.

    ``parent`` is a non-owning back reference: zones own their children
    through ``items``, children only point back.
    """

    display_type: str | None = None
    item: Any = None
    items: list[Shape] | None = None
    zones: dict[str, Shape] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    _parent: weakref.ref[Shape] | None = field(default=None, init=False, repr=False)

    @property
    def parent(self) -> Shape | None:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, shape: Shape | None) -> None:
        self._parent = weakref.ref(shape) if shape is not None else None


@dataclass(slots=True, eq=False, weakref_slot=True)
class Shape:
    """A renderable view-model fragment.

    Usage::

        title = Shape(ShapeMeta(type="title"), data={"text": "Hello"})
        title.data["text"]
    """

    meta: ShapeMeta = field(default_factory=ShapeMeta)
    temp: ShapeTemp = field(default_factory=ShapeTemp)
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_zone(self) -> bool:
        """True for shapes that hold placed children."""
        return self.temp.items is not None

    def copy(self) -> Shape:
        """Shallow clone sharing ``meta`` and ``temp``, with its own data dict."""
        return Shape(meta=self.meta, temp=self.temp, data=dict(self.data))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Shape:
        """Build a shape from the plain dict form produced by part loaders.

        ``{"meta": {...}, "temp": {...}, **data}``
        """
        meta_raw = dict(raw.get("meta") or {})
        temp_raw = {_ALIASES.get(k, k): v for k, v in (raw.get("temp") or {}).items()}

        meta = ShapeMeta(
            type=meta_raw.get("type"),
            name=meta_raw.get("name"),
            alternates=list(meta_raw.get("alternates") or ()),
            placement=meta_raw.get("placement"),
            item=meta_raw.get("item"),
        )
        temp = ShapeTemp(
            display_type=temp_raw.pop("display_type", None),
            item=temp_raw.pop("item", None),
        )
        temp.extra.update(temp_raw)
        data = {k: v for k, v in raw.items() if k not in ("meta", "temp")}
        return cls(meta=meta, temp=temp, data=data)


def lookup(value: Any, path: tuple[str, ...]) -> Any:
    """Walk *path* through shapes, mappings and objects.

    Returns ``MISSING`` as soon as a segment is absent; never raises.

    >>> shape = Shape(ShapeMeta(item={"meta": {"type": "post"}}))
    >>> lookup(shape, ("meta", "item", "meta", "type"))
    'post'
    """
    current = value
    for segment in path:
        current = _step(current, segment)
        if current is MISSING:
            return MISSING
    return current


def _step(value: Any, segment: str) -> Any:
    if value is None:
        return MISSING
    if isinstance(value, Shape):
        if segment == "meta":
            return value.meta
        if segment == "temp":
            return value.temp
        return value.data.get(segment, MISSING)
    if isinstance(value, Mapping):
        return value.get(segment, MISSING)
    if isinstance(value, ShapeTemp):
        name = _ALIASES.get(segment, segment)
        if name in ("display_type", "item", "items", "zones", "parent"):
            return getattr(value, name)
        return value.extra.get(segment, MISSING)
    return getattr(value, segment, MISSING)
