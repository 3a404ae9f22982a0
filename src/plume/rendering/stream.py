"""Render stream: the streaming shape dispatcher.

A ``RenderStream`` renders one shape: it picks the template, wraps the
output in an optional tag, and recurses into nested shapes through
inner streams. Inner streams share the page resources and the output
of the top-level stream, and run one after another, so markup reaches
the sink in traversal order.

Pipeline::

    stream = RenderStream(resolver, sink)
    await stream.render(layout)

    1. Empty zones render nothing, tag included
    2. Template candidates: shape_name, meta.alternates, meta.type,
       config.default_template; the first resolvable one wins
    3. The surrounding tag opens on the first body output
    4. Nested shapes render via ``render_child()`` in inner streams
    5. Output before the first resource slot streams as it is produced;
       after it, output is held until the page completes and the slots
       can be filled from the complete resource collections

The first error stops the render: no further siblings are rendered and
the same ``RenderError`` propagates through every enclosing stream.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from plume.config import RenderConfig
from plume.errors import RenderError, TemplateResolutionError
from plume.rendering.resources import PageResources, ResourceKind
from plume.rendering.templates import ShapeTemplate, TemplateResolver, call_template
from plume.shapes import Shape

logger = logging.getLogger("plume.render")

Sink = Callable[[str], Awaitable[None]]

# Work recorded behind a placeholder, run by the stream that outputs it
DeferredRender = Callable[["RenderStream"], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class _ResourceSlot:
    kind: ResourceKind


class _Output:
    """Output of one top-level render, shared by all its inner streams.

    Also holds the page-wide registry of deferred renders, so a
    placeholder expands correctly whichever template outputs it.
    """

    __slots__ = ("_deferred", "_held", "_last_id", "_ready", "_sink")

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self._ready: list[str] = []
        self._held: list[str | _ResourceSlot] | None = None
        self._deferred: dict[int, DeferredRender] = {}
        self._last_id = 0

    def defer(self, action: DeferredRender) -> int:
        self._last_id += 1
        self._deferred[self._last_id] = action
        return self._last_id

    def take(self, placeholder: int) -> DeferredRender | None:
        return self._deferred.pop(placeholder, None)

    def append(self, segment: str | _ResourceSlot) -> None:
        if self._held is not None:
            self._held.append(segment)
        elif isinstance(segment, _ResourceSlot):
            self._held = [segment]
        else:
            self._ready.append(segment)

    async def flush(self) -> None:
        if self._ready:
            text = "".join(self._ready)
            self._ready.clear()
            await self._sink(text)

    async def close(self, resources: PageResources) -> None:
        await self.flush()
        if self._held:
            text = "".join(
                resources.render(segment.kind) if isinstance(segment, _ResourceSlot) else segment
                for segment in self._held
            )
            self._held = None
            if text:
                await self._sink(text)


def template_candidates(shape: Shape, shape_name: str | None, default: str) -> tuple[str, ...]:
    """Template names to try for *shape*, most specific first, without duplicates."""
    names = [shape_name, *shape.meta.alternates, shape.meta.type, default]
    return tuple(dict.fromkeys(name for name in names if name))


def tag_html(tag: str, attributes: dict[str, Any] | None) -> str:
    attrs = "".join(
        f' {name}="{html.escape(str(value), quote=True)}"'
        for name, value in (attributes or {}).items()
        if value is not None
    )
    return f"<{tag}{attrs}>"


class RenderStream:
    """Renders one shape, and its nested shapes through inner streams.

    Each stream renders once. The top-level stream owns the output and
    the page resources; inner streams borrow both.

    Usage::

        chunks = []

        async def sink(chunk: str) -> None:
            chunks.append(chunk)

        stream = RenderStream(resolver, sink, config=RenderConfig(debug=True))
        stream.on_error(lambda exc: ...)
        await stream.render(layout)
    """

    __slots__ = (
        "_close_tag",
        "_error",
        "_error_hooks",
        "_finally_hooks",
        "_open_tag",
        "_output",
        "_parent",
        "_started",
        "config",
        "resolver",
        "resources",
    )

    def __init__(
        self,
        resolver: TemplateResolver,
        sink: Sink | None = None,
        *,
        config: RenderConfig | None = None,
        resources: PageResources | None = None,
        parent: RenderStream | None = None,
    ) -> None:
        self.resolver = resolver
        self.config = config or RenderConfig()
        self.resources = resources if resources is not None else PageResources(self.config)
        if parent is not None:
            self._output = parent._output
        elif sink is not None:
            self._output = _Output(sink)
        else:
            raise TypeError("a top-level RenderStream needs a sink")
        self._parent = parent
        self._open_tag: str | None = None
        self._close_tag: str | None = None
        self._started = False
        self._error: BaseException | None = None
        self._error_hooks: list[Callable[[RenderError], None]] = []
        self._finally_hooks: list[Callable[[], None]] = []

    @property
    def is_root(self) -> bool:
        return self._parent is None

    @property
    def parent(self) -> RenderStream | None:
        return self._parent

    # -- Hooks --

    def on_error(self, callback: Callable[[RenderError], None]) -> RenderStream:
        """Call *callback* with the first error of this render."""
        self._error_hooks.append(callback)
        return self

    def on_finally(self, callback: Callable[[], None]) -> RenderStream:
        """Call *callback* once when this render ends, successfully or not."""
        self._finally_hooks.append(callback)
        return self

    # -- Inner streams --

    def child(self) -> RenderStream:
        """A fresh stream sharing this stream's resources and output."""
        return RenderStream(
            self.resolver, config=self.config, resources=self.resources, parent=self
        )

    async def render_child(
        self,
        shape: Shape,
        *,
        tag: str | None = None,
        attributes: dict[str, Any] | None = None,
        shape_name: str | None = None,
    ) -> None:
        """Render a nested shape at the current output position."""
        await self.child().render(shape, tag=tag, attributes=attributes, shape_name=shape_name)

    # -- Rendering --

    async def render(
        self,
        shape: Shape,
        *,
        tag: str | None = None,
        attributes: dict[str, Any] | None = None,
        shape_name: str | None = None,
    ) -> None:
        """Render *shape*; returns once every nested render has completed.

        Raises:
            RenderError: The first failure anywhere in the subtree.
                ``TemplateResolutionError`` when no template resolves.
        """
        if self._started:
            raise RuntimeError("a RenderStream renders a single shape; use child() for more")
        self._started = True

        try:
            await self._render(shape, tag, attributes, shape_name)
            if self.is_root:
                await self._output.close(self.resources)
        except Exception as exc:
            if isinstance(exc, RenderError):
                error = exc
            else:
                error = RenderError(shape.meta.type, f"{type(exc).__name__}: {exc}")
            self._fail(error)
            if self.is_root:
                logger.exception("Render failed for shape %r", shape.meta.type or shape.meta.name)
            if error is exc:
                raise
            raise error from exc
        finally:
            hooks, self._finally_hooks = self._finally_hooks, []
            for hook in hooks:
                hook()

    async def _render(
        self,
        shape: Shape,
        tag: str | None,
        attributes: dict[str, Any] | None,
        shape_name: str | None,
    ) -> None:
        if shape.is_zone and not shape.temp.items:
            return

        template = self.resolve_template(shape, shape_name)
        if tag:
            self._open_tag = tag_html(tag, attributes)
            self._close_tag = f"</{tag}>"

        await call_template(template, shape, self)

        if self._open_tag is None and self._close_tag is not None:
            # Opened: something was written
            self._emit(self._close_tag)
        self._open_tag = self._close_tag = None
        await self.flush()

    def resolve_template(self, shape: Shape, shape_name: str | None = None) -> ShapeTemplate:
        candidates = template_candidates(shape, shape_name, self.config.default_template)
        for name in candidates:
            template = self.resolver.resolve(name)
            if template is not None:
                return template
        raise TemplateResolutionError(shape.meta.type, candidates)

    def _fail(self, error: RenderError) -> None:
        if self._error is not None:
            return
        self._error = error
        for hook in self._error_hooks:
            hook(error)

    # -- Output --

    def write(self, text: Any) -> None:
        """Write raw markup."""
        if text is None:
            return
        text = str(text)
        if text:
            self._emit(text)

    def write_encoded(self, text: Any) -> None:
        """Write HTML-escaped text."""
        if text is not None:
            self.write(html.escape(str(text)))

    def write_line(self, text: Any = "") -> None:
        self.write(f"{text}\n")

    def write_resources(self, kind: ResourceKind) -> None:
        """Write a slot listing the page's *kind* resources, filled when the page completes."""
        self._emit(_ResourceSlot(kind))

    def defer(self, action: DeferredRender) -> int:
        """Record *action* for later; returns its page-wide placeholder id."""
        return self._output.defer(action)

    async def expand(self, placeholder: int) -> None:
        """Run the work behind *placeholder* at this stream's position. Each runs once."""
        action = self._output.take(placeholder)
        if action is not None:
            await action(self)

    async def flush(self) -> None:
        """Push output that is ready to the sink."""
        await self._output.flush()

    def _emit(self, segment: str | _ResourceSlot) -> None:
        if self._open_tag is not None:
            opening, self._open_tag = self._open_tag, None
            self._emit(opening)
        if self._parent is not None:
            self._parent._emit(segment)
        else:
            self._output.append(segment)
