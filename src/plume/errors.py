"""Plume exception hierarchy.

Shared across placement and rendering so every module raises and
catches the same types.
"""

from dataclasses import dataclass


class PlumeError(Exception):
    """Base for all plume-specific errors."""


class ConfigurationError(PlumeError):
    """Raised when a ``RenderConfig`` is invalid."""


class PlacementError(PlumeError):
    """Raised when a shape cannot be placed as requested.

    Covers malformed self-placement, placing the same shape twice, and
    provider proposals for shapes that are not candidates.
    """


class PlacementRuleError(PlacementError):
    """A placement source is malformed.

    Raised while the rule set is built, never during placement, since
    rule sets are loaded once and reused across renders.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class RenderError(PlumeError):
    """Rendering a shape failed.

    Raised once at the innermost failing render; enclosing renders
    propagate the same instance.
    """

    shape_type: str | None
    detail: str = ""

    def __str__(self) -> str:
        label = self.shape_type or "<untyped shape>"
        if self.detail:
            return f"{label}: {self.detail}"
        return label


class TemplateResolutionError(RenderError):
    """No template could be resolved for a shape."""

    def __init__(self, shape_type: str | None, candidates: tuple[str, ...]) -> None:
        detail = "no template found among " + ", ".join(repr(c) for c in candidates)
        super().__init__(shape_type=shape_type, detail=detail)
        object.__setattr__(self, "candidates", candidates)


class PartLoaderError(PlumeError):
    """A part loader failed; nothing from the item is placed."""
