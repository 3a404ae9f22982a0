"""Tests for plume.rendering.helpers: placeholder splitting and template helpers."""

from plume.rendering.helpers import PlaceholderSplitter, TemplateHelpers
from plume.rendering.stream import RenderStream
from plume.rendering.templates import CodeTemplateResolver
from plume.shapes import Shape, ShapeMeta, ShapeTemp


def _split(*chunks: str) -> list[str | int]:
    splitter = PlaceholderSplitter()
    parts: list[str | int] = []
    for chunk in chunks:
        parts.extend(splitter.feed(chunk))
    parts.extend(splitter.close())
    return parts


async def _discard(chunk: str) -> None:
    pass


def _helpers(model: Shape | None = None) -> TemplateHelpers:
    stream = RenderStream(CodeTemplateResolver(), _discard)
    return TemplateHelpers(stream, model or Shape())


class TestPlaceholderSplitter:
    def test_plain_text(self) -> None:
        assert _split("<p>", "hello", "</p>") == ["<p>", "hello", "</p>"]

    def test_placeholder_inside_chunk(self) -> None:
        assert _split("<div>\x00plume:1\x00</div>") == ["<div>", 1, "</div>"]

    def test_adjacent_placeholders(self) -> None:
        assert _split("\x00plume:1\x00\x00plume:2\x00") == [1, 2]

    def test_placeholder_across_chunks(self) -> None:
        assert _split("<div>\x00plu", "me:12\x00</div>") == ["<div>", 12, "</div>"]

    def test_marker_split_at_start_byte(self) -> None:
        assert _split("a\x00", "plume:3\x00b") == ["a", 3, "b"]

    def test_unterminated_marker_flushed_on_close(self) -> None:
        assert _split("a\x00plume") == ["a", "\x00plume"]


class TestShapeHelper:
    def test_without_shape_or_data_renders_nothing(self) -> None:
        assert _helpers().shape() == ""

    def test_returns_placeholder(self) -> None:
        marker = _helpers().shape(Shape(ShapeMeta(type="item")))
        assert marker == "\x00plume:1\x00"

    def test_each_call_gets_its_own_placeholder(self) -> None:
        helpers = _helpers()
        first = helpers.shape(Shape(ShapeMeta(type="a")))
        second = helpers.shape(Shape(ShapeMeta(type="b")))
        assert first != second

    def test_unknown_zone_renders_nothing(self) -> None:
        assert _helpers().zone("missing") == ""

    def test_known_zone_returns_placeholder(self) -> None:
        zone = Shape(ShapeMeta(type="zone", name="content"), ShapeTemp(items=[], zones={}))
        model = Shape(temp=ShapeTemp(zones={"content": zone}))
        assert _helpers(model).zone("content") == "\x00plume:1\x00"


class TestResourceHelpers:
    def test_registration_renders_nothing(self) -> None:
        helpers = _helpers()
        assert helpers.style("site") == ""
        assert helpers.script("site") == ""
        assert helpers.meta("description", "about") == ""
        assert helpers.link("icon", "image/png", "/favicon.png") == ""

        resources = helpers.stream.resources
        assert list(resources.stylesheets) == ["/css/site.min.css"]
        assert list(resources.scripts) == ["/js/site.min.js"]
        assert "description" in resources.meta
        assert ("icon", "/favicon.png") in resources.links

    def test_empty_names_ignored(self) -> None:
        helpers = _helpers()
        helpers.style("")
        helpers.script("")
        assert not helpers.stream.resources.stylesheets
        assert not helpers.stream.resources.scripts

    def test_attribute_names(self) -> None:
        helpers = _helpers()
        helpers.meta("og", "x", http_equiv="refresh")
        assert helpers.stream.resources.meta["og"].attributes == (("http-equiv", "refresh"),)

    def test_title(self) -> None:
        helpers = _helpers()
        assert helpers.title() == ""
        assert helpers.title("Home") == ""
        assert helpers.title() == "Home"
        assert helpers.stream.resources.title == "Home"

    def test_listings_are_placeholders(self) -> None:
        helpers = _helpers()
        assert helpers.styles() == "\x00plume:1\x00"
        assert helpers.scripts() == "\x00plume:2\x00"
