"""Template-facing helpers, exposed to kida templates as ``render``.

kida renders synchronously while shapes render asynchronously, so the
helpers that produce nested markup do not render anything themselves.
They return a placeholder and record the deferred work with the page's
render output; the kida shape template splits its output on placeholders
and runs that work at the placeholder's position, which keeps output in
traversal order. Placeholder ids are unique across the page, so a
placeholder passed as data to another shape still expands there::

    <header>{{ render.shape(header, tag="header", class_="site-header") }}</header>
    {{ render.zone("content", tag="main") }}
    {{ render.style("site") }}{{ render.script("site") }}
    {{ render.styles() }}  ...  {{ render.scripts() }}

Resource listings become resource slots on the output, filled once the
whole page has rendered, so ``render.styles()`` works in the head even
for stylesheets registered further down the page.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from kida.template import Markup

from plume.rendering.resources import ResourceKind
from plume.shapes import Shape, ShapeMeta, ShapeTemp

if TYPE_CHECKING:
    from plume.rendering.stream import DeferredRender, RenderStream

PLACEHOLDER_RE = re.compile("\x00plume:(\\d+)\x00")
_MARKER_START = "\x00"


class TemplateHelpers:
    """Helpers bound to one shape's render stream."""

    __slots__ = ("model", "stream")

    def __init__(self, stream: RenderStream, model: Shape) -> None:
        self.stream = stream
        self.model = model

    # -- Nested shapes --

    def shape(
        self,
        shape: Shape | None = None,
        name: str | None = None,
        tag: str | None = None,
        attributes: dict[str, Any] | None = None,
        **params: Any,
    ) -> Markup:
        """Render *shape* (or a shape built from *params*) in place.

        ``class_``, ``style`` and ``data_*`` params become attributes of
        the surrounding tag; any other param becomes a data field of a
        shallow clone, so one shape can render differently at two sites.
        """
        tag_attributes = dict(attributes or {})
        data: dict[str, Any] = {}
        for key, value in params.items():
            if key in ("class_", "class"):
                tag_attributes["class"] = value
            elif key == "style":
                tag_attributes["style"] = value
            elif key.startswith("data_"):
                tag_attributes["data-" + key[5:].replace("_", "-")] = value
            else:
                data[key] = value

        if shape is None:
            if not data:
                return Markup("")
            target = Shape(meta=ShapeMeta(), temp=ShapeTemp(), data=data)
        else:
            target = shape.copy()
            target.data.update(data)

        return self._defer(
            lambda stream: stream.render_child(
                target, tag=tag, attributes=tag_attributes, shape_name=name
            ),
        )

    def zone(self, name: str, tag: str | None = None, **attributes: Any) -> Markup:
        """Render the current shape's child zone *name*; unknown zones render nothing."""
        zones = self.model.temp.zones or {}
        zone = zones.get(name)
        if zone is None:
            return Markup("")
        tag_attributes = {_attribute_name(k): v for k, v in attributes.items()}
        return self._defer(
            lambda stream: stream.render_child(zone, tag=tag, attributes=tag_attributes),
        )

    # -- Resource registration --

    def style(self, name: str) -> Markup:
        if name:
            self.stream.resources.add_stylesheet(name)
        return Markup("")

    def script(self, name: str) -> Markup:
        if name:
            self.stream.resources.add_script(name)
        return Markup("")

    def meta(self, name: str, value: Any = "", **attributes: Any) -> Markup:
        self.stream.resources.add_meta(name, value, **_tag_attributes(attributes))
        return Markup("")

    def link(
        self,
        rel: str,
        type: str = "",  # noqa: A002
        href: str = "",
        **attributes: Any,
    ) -> Markup:
        self.stream.resources.add_link(rel, type, href, **_tag_attributes(attributes))
        return Markup("")

    def title(self, value: str | None = None) -> str:
        """Set the page title when *value* is given, otherwise return it."""
        if value is not None:
            self.stream.resources.title = value
            return ""
        return self.stream.resources.title or ""

    # -- Resource listings --

    def styles(self) -> Markup:
        return self._slot("stylesheets")

    def scripts(self) -> Markup:
        return self._slot("scripts")

    def metas(self) -> Markup:
        return self._slot("meta")

    def links(self) -> Markup:
        return self._slot("links")

    # -- Placeholders --

    def _slot(self, kind: ResourceKind) -> Markup:
        async def _write_slot(stream: RenderStream) -> None:
            stream.write_resources(kind)

        return self._defer(_write_slot)

    def _defer(self, action: DeferredRender) -> Markup:
        return Markup(f"\x00plume:{self.stream.defer(action)}\x00")


def _attribute_name(key: str) -> str:
    if key in ("class_", "klass"):
        return "class"
    return key.replace("_", "-")


def _tag_attributes(attributes: dict[str, Any]) -> dict[str, str]:
    return {_attribute_name(k): str(v) for k, v in attributes.items()}


class PlaceholderSplitter:
    """Splits a chunk stream into text and placeholder ids.

    Placeholders may straddle chunk boundaries, so a trailing partial
    marker is held back until the next chunk arrives.
    """

    __slots__ = ("_buffer",)

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> Iterator[str | int]:
        buffer = self._buffer + chunk
        position = 0
        for match in PLACEHOLDER_RE.finditer(buffer):
            if match.start() > position:
                yield buffer[position : match.start()]
            yield int(match.group(1))
            position = match.end()

        rest = buffer[position:]
        marker = rest.find(_MARKER_START)
        if marker == -1:
            self._buffer = ""
            if rest:
                yield rest
        else:
            self._buffer = rest[marker:]
            if marker:
                yield rest[:marker]

    def close(self) -> Iterator[str]:
        if self._buffer:
            yield self._buffer
        self._buffer = ""
