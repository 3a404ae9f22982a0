"""Render configuration.

One frozen ``RenderConfig`` serves placement discovery and rendering
for a page.
"""

from dataclasses import dataclass
from pathlib import Path

from plume.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Render configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RenderConfig(debug=True, template_dirs=("themes/default", "modules/blog"))
    """

    debug: bool = False

    # Templates
    template_dirs: tuple[str | Path, ...] = ()  # Searched in order, first match wins
    template_extension: str = ".html"
    default_template: str = "shape"  # Last candidate when alternates and type don't resolve
    autoescape: bool = True

    # Page resources
    script_url: str = "/js/"
    stylesheet_url: str = "/css/"

    # Placement sources, looked up in each module directory
    placement_file: str = "placement.json"
    placement_module: str = "placement.py"

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the configuration is unusable."""
        if not self.default_template:
            raise ConfigurationError("default_template must not be empty")
        if not self.template_extension.startswith("."):
            msg = f"template_extension must start with '.', got {self.template_extension!r}"
            raise ConfigurationError(msg)
