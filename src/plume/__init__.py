"""Plume: shape placement and streaming rendering for content pages.

Content items become small view-model fragments (shapes); declarative,
independently authored rules position them into named zones of a layout;
a streaming render turns the zone tree into HTML through kida templates.

Basic usage::

    from plume import PlacementStrategy, RenderConfig, Shape, ShapeMeta
    from plume import default_resolver, render_page

    config = RenderConfig(template_dirs=("themes/default",))
    html = await render_page(
        Shape(ShapeMeta(type="layout")),
        shapes,
        strategy=PlacementStrategy.from_directories(["modules/core"]),
        resolver=default_resolver(config),
        config=config,
    )
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ConfigurationError",
    "PartLoaderError",
    "PageResources",
    "Placement",
    "PlacementError",
    "PlacementRuleError",
    "PlacementStrategy",
    "PlumeError",
    "RenderConfig",
    "RenderError",
    "RenderStream",
    "RuleSet",
    "Shape",
    "ShapeMeta",
    "ShapeTemp",
    "TemplateResolutionError",
    "default_resolver",
    "load_parts",
    "render_page",
    "stream_page",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "plume.errors",
    "PartLoaderError": "plume.errors",
    "PlacementError": "plume.errors",
    "PlacementRuleError": "plume.errors",
    "PlumeError": "plume.errors",
    "RenderError": "plume.errors",
    "TemplateResolutionError": "plume.errors",
    "RenderConfig": "plume.config",
    "Shape": "plume.shapes",
    "ShapeMeta": "plume.shapes",
    "ShapeTemp": "plume.shapes",
    "Placement": "plume.placement",
    "PlacementStrategy": "plume.placement",
    "RuleSet": "plume.placement",
    "PageResources": "plume.rendering",
    "RenderStream": "plume.rendering",
    "default_resolver": "plume.rendering",
    "load_parts": "plume.pipeline",
    "render_page": "plume.pipeline",
    "stream_page": "plume.pipeline",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import plume`` fast while providing a clean top-level API.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_path), name)
