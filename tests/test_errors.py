"""Tests for plume.errors: hierarchy and messages."""

import pytest

from plume.errors import (
    ConfigurationError,
    PartLoaderError,
    PlacementError,
    PlacementRuleError,
    PlumeError,
    RenderError,
    TemplateResolutionError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error_type",
        [ConfigurationError, PartLoaderError, PlacementError, PlacementRuleError, RenderError, TemplateResolutionError],
    )
    def test_all_derive_from_base(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, PlumeError)

    def test_rule_errors_are_placement_errors(self) -> None:
        assert issubclass(PlacementRuleError, PlacementError)

    def test_resolution_errors_are_render_errors(self) -> None:
        assert issubclass(TemplateResolutionError, RenderError)


class TestMessages:
    def test_rule_error_names_source(self) -> None:
        error = PlacementRuleError("bad pattern", "modules/blog/placement.json")
        assert str(error) == "modules/blog/placement.json: bad pattern"
        assert error.source == "modules/blog/placement.json"

    def test_rule_error_without_source(self) -> None:
        error = PlacementRuleError("bad pattern")
        assert str(error) == "bad pattern"
        assert error.source is None

    def test_render_error(self) -> None:
        assert str(RenderError("article", "boom")) == "article: boom"
        assert str(RenderError(None)) == "<untyped shape>"

    def test_resolution_error(self) -> None:
        error = TemplateResolutionError("article", ("teaser", "article", "shape"))
        assert error.candidates == ("teaser", "article", "shape")
        assert str(error) == "article: no template found among 'teaser', 'article', 'shape'"

    def test_render_error_is_raisable(self) -> None:
        with pytest.raises(RenderError, match="boom"):
            raise RenderError("article", "boom")
