"""Page-level resources shared by every render in one page.

Templates anywhere in the shape tree register scripts, stylesheets,
meta tags and links; the page layout lists them in its head or foot.
Collections keep registration order and ignore duplicates.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Literal

from plume.config import RenderConfig

ResourceKind = Literal["scripts", "stylesheets", "meta", "links"]

_EXTERNAL_RE = re.compile(r"^(https?:)?//")


def is_external(name: str) -> bool:
    """True for absolute and protocol-relative URLs."""
    return _EXTERNAL_RE.match(name) is not None


def _attrs(attributes: dict[str, str]) -> str:
    return "".join(
        f' {name}="{html.escape(str(value), quote=True)}"' for name, value in attributes.items()
    )


@dataclass(frozen=True, slots=True)
class MetaTag:
    name: str
    content: str = ""
    attributes: tuple[tuple[str, str], ...] = ()

    def to_html(self) -> str:
        attributes = {"name": self.name, "content": self.content, **dict(self.attributes)}
        return f"<meta{_attrs(attributes)}/>"


@dataclass(frozen=True, slots=True)
class LinkTag:
    rel: str
    type: str = ""
    href: str = ""
    attributes: tuple[tuple[str, str], ...] = ()

    def to_html(self) -> str:
        attributes = {"rel": self.rel}
        if self.type:
            attributes["type"] = self.type
        attributes["href"] = self.href
        attributes.update(self.attributes)
        return f"<link{_attrs(attributes)}/>"


@dataclass(slots=True)
class PageResources:
    """Ordered, deduplicated resource collections plus the page title.

    One instance per top-level render; nested render streams hold a
    reference to the same instance.

    Local script and stylesheet names resolve against the configured
    URLs and get a ``.min`` suffix outside debug mode::

        resources.add_script("site")        # /js/site.min.js
        resources.add_script("//cdn/x.js")  # //cdn/x.js
    """

    config: RenderConfig = field(default_factory=RenderConfig)
    title: str | None = None
    scripts: dict[str, None] = field(default_factory=dict)
    stylesheets: dict[str, None] = field(default_factory=dict)
    meta: dict[str, MetaTag] = field(default_factory=dict)
    links: dict[tuple[str, str], LinkTag] = field(default_factory=dict)

    # -- Registration --

    def add_script(self, name: str) -> str:
        url = name if is_external(name) else self._local_url(self.config.script_url, name, ".js")
        self.scripts.setdefault(url)
        return url

    def add_stylesheet(self, name: str) -> str:
        if is_external(name):
            url = name
        else:
            url = self._local_url(self.config.stylesheet_url, name, ".css")
        self.stylesheets.setdefault(url)
        return url

    def add_meta(self, name: str, content: str = "", **attributes: str) -> None:
        self.meta.setdefault(name, MetaTag(name, str(content), tuple(attributes.items())))

    def add_link(
        self,
        rel: str,
        type: str = "",  # noqa: A002
        href: str = "",
        **attributes: str,
    ) -> None:
        self.links.setdefault((rel, href), LinkTag(rel, type, href, tuple(attributes.items())))

    # -- Rendering --

    def render_scripts(self) -> str:
        return "\n".join(
            f'<script src="{html.escape(url, quote=True)}"></script>' for url in self.scripts
        )

    def render_stylesheets(self) -> str:
        return "\n".join(
            f'<link href="{html.escape(url, quote=True)}" rel="stylesheet" type="text/css"/>'
            for url in self.stylesheets
        )

    def render_meta(self) -> str:
        return "\n".join(tag.to_html() for tag in self.meta.values())

    def render_links(self) -> str:
        return "\n".join(tag.to_html() for tag in self.links.values())

    def render(self, kind: ResourceKind) -> str:
        """Render one collection by kind."""
        match kind:
            case "scripts":
                return self.render_scripts()
            case "stylesheets":
                return self.render_stylesheets()
            case "meta":
                return self.render_meta()
            case "links":
                return self.render_links()
        raise ValueError(f"unknown resource kind {kind!r}")

    def _local_url(self, base: str, name: str, extension: str) -> str:
        suffix = extension if self.config.debug else f".min{extension}"
        return f"{base.rstrip('/')}/{name.lstrip('/')}{suffix}"
