"""Declarative placement rules and the rule matcher.

A placement source is plain data, typically a module's ``placement.json``::

    {
        "matches": [
            {"type": "^(page|post)$", "displayType": "summary", "path": "content/header"},
            {"meta.item.meta.type": "^deep-.*", "path": "zone2", "order": "3"}
        ],
        "tag-cloud-widget": {"path": "footer"},
        "shape1": "zone1:2.1"
    }

Entries in ``matches`` are pattern rules: every key other than ``path``
and ``order`` is a predicate whose value is a regular expression searched
in the stringified attribute. Every other top-level key is a shorthand
rule for shapes with that exact ``meta.name`` or ``meta.type``.

Sources merge into an immutable ``RuleSet``. Pattern rules from every
source are consulted before any shorthand rule; within each class the
earlier source wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from plume.errors import PlacementError, PlacementRuleError
from plume.placement.types import Placement
from plume.shapes import MISSING, Shape, lookup

MATCHES_KEY = "matches"
_TARGET_KEYS = frozenset({"path", "order"})

# Predicate keys that address shape metadata rather than data fields
_WELL_KNOWN: dict[str, tuple[str, ...]] = {
    "type": ("meta", "type"),
    "name": ("meta", "name"),
    "displayType": ("temp", "display_type"),
    "display_type": ("temp", "display_type"),
    "id": ("id",),
}


def predicate_path(key: str) -> tuple[str, ...]:
    """Path descriptor for a predicate key.

    >>> predicate_path("displayType")
    ('temp', 'display_type')
    >>> predicate_path("meta.item.meta.type")
    ('meta', 'item', 'meta', 'type')
    """
    if key in _WELL_KNOWN:
        return _WELL_KNOWN[key]
    return tuple(key.split("."))


@dataclass(frozen=True, slots=True)
class PlacementRule:
    """A pattern rule: all predicates must match for the placement to apply."""

    predicates: tuple[tuple[tuple[str, ...], re.Pattern[str]], ...]
    placement: Placement
    source: str | None = None

    def matches(self, shape: Shape) -> bool:
        for path, pattern in self.predicates:
            value = lookup(shape, path)
            if value is MISSING or value is None:
                return False
            if pattern.search(str(value)) is None:
                return False
        return True


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Ordered, merged placement rules.

    Build with ``RuleSet.from_sources()``; combine with ``merge()``.
    Instances are immutable and safe to share across renders.
    """

    patterns: tuple[PlacementRule, ...] = ()
    shorthands: Mapping[str, Placement] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.patterns) + len(self.shorthands)

    def match(self, shape: Shape) -> Placement | None:
        """Placement for *shape*, or ``None`` when no rule applies.

        Pattern rules first (first full match wins), then the shorthand
        keyed by ``meta.name``, then the one keyed by ``meta.type``.
        """
        for rule in self.patterns:
            if rule.matches(shape):
                return rule.placement
        name = shape.meta.name
        if name and name in self.shorthands:
            return self.shorthands[name]
        type_ = shape.meta.type
        if type_ and type_ in self.shorthands:
            return self.shorthands[type_]
        return None

    def merge(self, other: RuleSet) -> RuleSet:
        """Combine two rule sets; rules in ``self`` take precedence."""
        shorthands = dict(other.shorthands)
        shorthands.update(self.shorthands)
        ordered = {k: shorthands[k] for k in (*self.shorthands, *other.shorthands)}
        return RuleSet(
            patterns=self.patterns + other.patterns,
            shorthands=MappingProxyType(ordered),
        )

    @classmethod
    def from_source(cls, source: Mapping[str, Any], name: str | None = None) -> RuleSet:
        """Compile one declarative source.

        Raises:
            PlacementRuleError: For invalid patterns, missing paths or
                malformed order keys.
        """
        if not isinstance(source, Mapping):
            msg = f"placement source must be a mapping, got {type(source).__name__}"
            raise PlacementRuleError(msg, name)

        raw_matches = source.get(MATCHES_KEY, ())
        if not isinstance(raw_matches, (list, tuple)):
            raise PlacementRuleError(f"'{MATCHES_KEY}' must be a list", name)

        patterns = tuple(
            _compile_rule(entry, index, name) for index, entry in enumerate(raw_matches)
        )

        shorthands: dict[str, Placement] = {}
        for key, value in source.items():
            if key == MATCHES_KEY:
                continue
            try:
                shorthands[key] = Placement.parse(value)
            except PlacementError as exc:
                raise PlacementRuleError(f"rule {key!r}: {exc}", name) from exc

        return cls(patterns=patterns, shorthands=MappingProxyType(shorthands))

    @classmethod
    def from_sources(cls, sources: Iterable[Mapping[str, Any] | RuleSet]) -> RuleSet:
        """Merge sources in discovery order; earlier sources win."""
        merged = cls()
        for source in sources:
            rules = source if isinstance(source, RuleSet) else cls.from_source(source)
            merged = merged.merge(rules)
        return merged


def _compile_rule(entry: Any, index: int, source: str | None) -> PlacementRule:
    if not isinstance(entry, Mapping):
        raise PlacementRuleError(f"match #{index} must be a mapping", source)

    try:
        placement = Placement.parse({k: entry[k] for k in _TARGET_KEYS if k in entry})
    except PlacementError as exc:
        raise PlacementRuleError(f"match #{index}: {exc}", source) from exc

    predicates = []
    for key, pattern in entry.items():
        if key in _TARGET_KEYS:
            continue
        try:
            compiled = re.compile(str(pattern))
        except re.error as exc:
            msg = f"match #{index}: invalid pattern {pattern!r} for {key!r}: {exc}"
            raise PlacementRuleError(msg, source) from exc
        predicates.append((predicate_path(key), compiled))

    return PlacementRule(predicates=tuple(predicates), placement=placement, source=source)
