"""Page pipeline: load parts, place shapes, render.

::

    html = await render_page(
        layout,
        shapes,
        strategy=PlacementStrategy.from_directories(module_dirs),
        resolver=default_resolver(config),
        loaders=[load_dates(item), load_markdown(item)],
    )

    1. Run part loaders concurrently (anyio task group); any failure
       aborts before anything is placed
    2. Place shapes into the layout's zones
    3. Render the layout through a top-level RenderStream

``stream_page()`` runs the same pipeline in a task group it owns and
hands out the chunks as they are produced::

    async with stream_page(layout, shapes, strategy=strategy, resolver=resolver) as chunks:
        async for chunk in chunks:
            await send(chunk)
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any

import anyio
from anyio.abc import ObjectReceiveStream

from plume.config import RenderConfig
from plume.errors import PartLoaderError
from plume.placement.strategy import PlacementStrategy
from plume.rendering.stream import RenderStream
from plume.rendering.templates import TemplateResolver
from plume.shapes import Shape

PartLoader = Awaitable[Any] | Callable[[], Awaitable[Any]]

# Chunks buffered between the render and a slow consumer
STREAM_BUFFER_SIZE = 64


async def load_parts(loaders: Iterable[PartLoader]) -> list[Any]:
    """Await part loaders concurrently; results come back in input order.

    Raises:
        PartLoaderError: If any loader fails, including a loader that
            raises when called. Chained to the failures.
    """
    loaders = list(loaders)
    results: list[Any] = [None] * len(loaders)
    if not loaders:
        return results

    async def _resolve(index: int, loader: PartLoader) -> None:
        results[index] = await (loader if inspect.isawaitable(loader) else loader())

    try:
        async with anyio.create_task_group() as tg:
            for index, loader in enumerate(loaders):
                tg.start_soon(_resolve, index, loader)
    except ExceptionGroup as group:
        first = group.exceptions[0]
        msg = f"{len(group.exceptions)} part loader(s) failed: {first}"
        raise PartLoaderError(msg) from group

    return results


async def render_page(
    layout: Shape,
    shapes: Iterable[Shape],
    *,
    strategy: PlacementStrategy,
    resolver: TemplateResolver,
    config: RenderConfig | None = None,
    loaders: Iterable[PartLoader] = (),
) -> str:
    """Run the whole pipeline and return the page markup."""
    chunks: list[str] = []

    async def _sink(chunk: str) -> None:
        chunks.append(chunk)

    await load_parts(loaders)
    strategy.place_shapes(layout, shapes)
    await RenderStream(resolver, _sink, config=config).render(layout)
    return "".join(chunks)


@asynccontextmanager
async def stream_page(
    layout: Shape,
    shapes: Iterable[Shape],
    *,
    strategy: PlacementStrategy,
    resolver: TemplateResolver,
    config: RenderConfig | None = None,
    loaders: Iterable[PartLoader] = (),
) -> AsyncIterator[ObjectReceiveStream[str]]:
    """Run the whole pipeline, handing out a stream of markup chunks.

    Leaving the block early cancels the render. A render error is raised
    when the block exits, after the chunks produced before the failure.
    An error raised inside the block propagates unchanged.
    """
    await load_parts(loaders)
    strategy.place_shapes(layout, shapes)

    send, receive = anyio.create_memory_object_stream[str](STREAM_BUFFER_SIZE)
    failure: list[Exception] = []
    consumer_error: Exception | None = None

    async def _produce() -> None:
        async with send:
            try:
                await RenderStream(resolver, send.send, config=config).render(layout)
            except Exception as exc:
                failure.append(exc)

    async with anyio.create_task_group() as tg:
        tg.start_soon(_produce)
        try:
            yield receive
        except Exception as exc:
            consumer_error = exc
        finally:
            # Ends the render when the block is left early
            tg.cancel_scope.cancel()
    receive.close()

    if consumer_error is not None:
        raise consumer_error
    if failure:
        raise failure[0]
