"""Tests for plume.config: RenderConfig defaults and validation."""

import dataclasses

import pytest

from plume.config import RenderConfig
from plume.errors import ConfigurationError


class TestRenderConfig:
    def test_defaults(self) -> None:
        cfg = RenderConfig()
        assert cfg.debug is False
        assert cfg.template_dirs == ()
        assert cfg.template_extension == ".html"
        assert cfg.default_template == "shape"
        assert cfg.autoescape is True
        assert cfg.script_url == "/js/"
        assert cfg.stylesheet_url == "/css/"
        assert cfg.placement_file == "placement.json"
        assert cfg.placement_module == "placement.py"

    def test_frozen(self) -> None:
        cfg = RenderConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.debug = True  # type: ignore[misc]

    def test_replace(self) -> None:
        cfg = dataclasses.replace(RenderConfig(), debug=True)
        assert cfg.debug is True

    def test_valid_config(self) -> None:
        RenderConfig(template_dirs=("themes/default",)).validate()

    def test_empty_default_template(self) -> None:
        with pytest.raises(ConfigurationError, match="default_template"):
            RenderConfig(default_template="").validate()

    def test_extension_needs_dot(self) -> None:
        with pytest.raises(ConfigurationError, match="template_extension"):
            RenderConfig(template_extension="html").validate()
