"""Streaming shape rendering.

Usage::

    resolver = default_resolver(config, code_templates={"title": title_view})
    stream = RenderStream(resolver, sink, config=config)
    await stream.render(layout)
"""

from plume.rendering.helpers import PlaceholderSplitter, TemplateHelpers
from plume.rendering.resources import LinkTag, MetaTag, PageResources, is_external
from plume.rendering.stream import RenderStream, Sink, template_candidates
from plume.rendering.templates import (
    BUILTIN_TEMPLATES,
    ChainTemplateResolver,
    CodeTemplateResolver,
    KidaShapeTemplate,
    KidaTemplateResolver,
    ShapeTemplate,
    TemplateResolver,
    create_environment,
    default_resolver,
    zone_template,
)

__all__ = [
    "BUILTIN_TEMPLATES",
    "ChainTemplateResolver",
    "CodeTemplateResolver",
    "KidaShapeTemplate",
    "KidaTemplateResolver",
    "LinkTag",
    "MetaTag",
    "PageResources",
    "PlaceholderSplitter",
    "RenderStream",
    "ShapeTemplate",
    "Sink",
    "TemplateHelpers",
    "TemplateResolver",
    "create_environment",
    "default_resolver",
    "is_external",
    "template_candidates",
    "zone_template",
]
