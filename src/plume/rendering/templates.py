"""Template resolution: maps template names to shape templates.

A shape template is any callable ``template(shape, stream)``; it may be
a coroutine function. It writes markup through the stream::

    def title(shape, stream):
        stream.write("<h1>")
        stream.write_encoded(shape.data["text"])
        stream.write_line("</h1>")

Resolvers turn a name into a template or ``None``:

- ``KidaTemplateResolver``: ``<name>.html`` in a kida environment
- ``CodeTemplateResolver``: Python callables registered by name
- ``ChainTemplateResolver``: first resolver that knows the name wins
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from kida import ChoiceLoader, Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError

from plume.config import RenderConfig
from plume.rendering.helpers import PlaceholderSplitter, TemplateHelpers
from plume.shapes import Shape

if TYPE_CHECKING:
    from kida.template import Template

    from plume.rendering.stream import RenderStream

ShapeTemplate = Callable[[Shape, "RenderStream"], Awaitable[None] | None]

# Context names a shape's data fields cannot shadow
RESERVED_NAMES = frozenset({"meta", "temp", "model", "render"})


class TemplateResolver(Protocol):
    def resolve(self, name: str) -> ShapeTemplate | None: ...


def create_environment(config: RenderConfig) -> Environment:
    """Create a kida Environment over the configured template directories.

    Directories are searched in order, so a theme listed first overrides
    module templates listed after it.
    """
    loader = ChoiceLoader([FileSystemLoader(str(d)) for d in config.template_dirs])
    return Environment(
        loader=loader,
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


def template_context(shape: Shape, helpers: TemplateHelpers) -> dict[str, Any]:
    """The kida render context for *shape*: its data plus reserved names."""
    context = {k: v for k, v in shape.data.items() if k not in RESERVED_NAMES}
    context.update(meta=shape.meta, temp=shape.temp, model=shape, render=helpers)
    return context


class KidaShapeTemplate:
    """Streams a kida template, expanding nested renders at their placeholders."""

    __slots__ = ("template",)

    def __init__(self, template: Template) -> None:
        self.template = template

    async def __call__(self, shape: Shape, stream: RenderStream) -> None:
        helpers = TemplateHelpers(stream, shape)
        splitter = PlaceholderSplitter()

        for chunk in self.template.render_stream(template_context(shape, helpers)):
            for part in splitter.feed(chunk):
                if isinstance(part, int):
                    await stream.expand(part)
                else:
                    stream.write(part)
            await stream.flush()

        for rest in splitter.close():
            stream.write(rest)

    def __repr__(self) -> str:
        return f"KidaShapeTemplate({getattr(self.template, 'name', None)!r})"


class KidaTemplateResolver:
    """Resolves ``<name><extension>`` in a kida environment."""

    __slots__ = ("env", "extension")

    def __init__(self, env: Environment, extension: str = ".html") -> None:
        self.env = env
        self.extension = extension

    def resolve(self, name: str) -> ShapeTemplate | None:
        try:
            template = self.env.get_template(f"{name}{self.extension}")
        except TemplateNotFoundError:
            return None
        return KidaShapeTemplate(template)


async def zone_template(shape: Shape, stream: RenderStream) -> None:
    """Built-in ``zone`` template: each placed child, in zone order."""
    for item in shape.temp.items or ():
        await stream.render_child(item)


BUILTIN_TEMPLATES: dict[str, ShapeTemplate] = {
    "zone": zone_template,
}


class CodeTemplateResolver:
    """Resolves Python callables registered by name.

    Built-in templates are included unless ``builtins=False``; templates
    passed in override them.
    """

    __slots__ = ("_templates",)

    def __init__(
        self,
        templates: Mapping[str, ShapeTemplate] | None = None,
        *,
        builtins: bool = True,
    ) -> None:
        self._templates: dict[str, ShapeTemplate] = dict(BUILTIN_TEMPLATES) if builtins else {}
        if templates:
            for name, template in templates.items():
                if not callable(template):
                    raise TypeError(f"template {name!r} is not callable")
                self._templates[name] = template

    def resolve(self, name: str) -> ShapeTemplate | None:
        return self._templates.get(name)


class ChainTemplateResolver:
    """Asks each resolver in turn; the first one that knows the name wins."""

    __slots__ = ("resolvers",)

    def __init__(self, resolvers: Sequence[TemplateResolver]) -> None:
        self.resolvers = tuple(resolvers)

    def resolve(self, name: str) -> ShapeTemplate | None:
        for resolver in self.resolvers:
            template = resolver.resolve(name)
            if template is not None:
                return template
        return None


def default_resolver(
    config: RenderConfig,
    code_templates: Mapping[str, ShapeTemplate] | None = None,
    env: Environment | None = None,
) -> ChainTemplateResolver:
    """kida templates first (themes can override built-ins), then code templates."""
    env = env if env is not None else create_environment(config)
    return ChainTemplateResolver(
        [
            KidaTemplateResolver(env, config.template_extension),
            CodeTemplateResolver(code_templates),
        ]
    )


async def call_template(template: ShapeTemplate, shape: Shape, stream: RenderStream) -> None:
    """Invoke a sync or async shape template."""
    result = template(shape, stream)
    if inspect.isawaitable(result):
        await result
