"""Allow/deny rule tables and the decisions made from them.

Rules are supplied as *fragments*, nested mappings of the form::

    {tag: {attribute: [value, ...]}}

Three words are reserved:

- ``any``: every attribute (at the attribute level) or every value (at the
  value level). As a tag name it makes the attribute rules under it apply to
  every tag.
- ``none``: nothing at this level. ``{"p": ["none"]}`` keeps ``<p>`` but
  none of its attributes.
- ``all``: deny rules only. ``{"img": ["all"]}`` removes the whole tag, not
  just its attributes.

Every key is lowercased on the way in and on every query, so rule matching is
case-insensitive throughout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Set
from typing import Any

from .errors import RuleError, RuleStoreError

logger = logging.getLogger(__name__)

ANY = "any"
NONE = "none"
ALL = "all"

ALLOW = "allow"
DENY = "deny"
KINDS = (ALLOW, DENY)

# A fragment as callers write it. The per-tag value may also be a collection
# of attribute names, and a value list may be a single string or None.
Fragment = Mapping[str, Any]
Snapshot = dict[str, dict[str, list[str]]]


class RuleTable:
    """One kind of rule (allow or deny), stored as tag -> attribute -> values.

    A tag entry with no attributes and an attribute entry with no values are
    both still *present*: only membership is ever tested.
    """

    __slots__ = ("_tags", "kind")

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._tags: dict[str, dict[str, frozenset[str]]] = {}

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"RuleTable({self.kind!r}, tags={sorted(self._tags)!r})"

    def merge(self, fragment: Fragment) -> None:
        """Replace the rules of every tag named in `fragment`.

        Tags the fragment does not mention keep their current rules. The
        fragment is validated completely before anything is stored.
        """
        compiled = _compile_fragment(fragment, self.kind)
        self._tags.update(compiled)
        logger.debug("merged %d %s rule(s): %s", len(compiled), self.kind, ", ".join(sorted(compiled)))

    def clear(self) -> None:
        self._tags = {}
        logger.debug("cleared %s rules", self.kind)

    def has_tag(self, tag: str) -> bool:
        return self._lookup(tag)

    def has_attribute(self, tag: str, attribute: str) -> bool:
        return self._lookup(tag, attribute)

    def has_value(self, tag: str, attribute: str, value: str) -> bool:
        return self._lookup(tag, attribute, value)

    def _lookup(self, *keys: str) -> bool:
        # Walks the nested tables without creating anything on the way down.
        node: Any = self._tags
        for key in keys:
            if isinstance(node, Mapping):
                if key not in node:
                    return False
                node = node[key]
            elif isinstance(node, Set):
                if key not in node:
                    return False
                node = None
            else:
                raise RuleStoreError(
                    f"{self.kind} rules are malformed: expected a container for {key!r} "
                    f"(path {keys!r}), found {type(node).__name__}"
                )
        return True

    def snapshot(self) -> Snapshot:
        """Return the rules as a plain fragment that `merge` accepts again."""
        result: Snapshot = {}
        for tag, attributes in self._tags.items():
            result[tag] = {attribute: sorted(values) or [NONE] for attribute, values in attributes.items()}
        return result


class RuleSet:
    """Allow and deny rules plus the decisions made from them.

    Deny rules are always consulted first and win. Anything no allow rule
    matches is removed, so an empty rule set removes every tag.

    The two kinds are not symmetrical. Allowing ``p`` (with any attribute
    rules, or none) admits the ``<p>`` tag itself, but denying attributes of
    ``p`` never removes the tag: only the ``all`` pseudo-attribute does that.
    """

    __slots__ = ("_allows", "_denies")

    def __init__(self, allow: Fragment | None = None, deny: Fragment | None = None) -> None:
        self._allows = RuleTable(ALLOW)
        self._denies = RuleTable(DENY)
        if allow is not None:
            self.allow(allow)
        if deny is not None:
            self.deny(deny)

    def __repr__(self) -> str:
        return f"RuleSet(allow={self._allows.snapshot()!r}, deny={self._denies.snapshot()!r})"

    # Configuration

    def allow(self, fragment: Fragment | None = None) -> None:
        """Merge permission rules, tag by tag. An empty or missing fragment clears them."""
        self.merge(ALLOW, fragment)

    def deny(self, fragment: Fragment | None = None) -> None:
        """Merge denial rules, tag by tag. An empty or missing fragment clears them."""
        self.merge(DENY, fragment)

    def merge(self, kind: str, fragment: Fragment | None) -> None:
        table = self._table(kind)
        if fragment is None or (isinstance(fragment, Mapping) and not fragment):
            table.clear()
        else:
            table.merge(fragment)

    def allows(self) -> Snapshot:
        return self._allows.snapshot()

    def denies(self) -> Snapshot:
        return self._denies.snapshot()

    def snapshot(self, kind: str) -> Snapshot:
        return self._table(kind).snapshot()

    def _table(self, kind: str) -> RuleTable:
        if kind == ALLOW:
            return self._allows
        if kind == DENY:
            return self._denies
        raise RuleError(f"Unknown rule kind {kind!r}; expected one of {KINDS!r}")

    # Tag decisions

    def tag_permitted(self, tag: str) -> bool:
        tag = tag.lower()
        # The pseudo-tag only carries attribute rules; it never admits a tag called "any".
        return tag != ANY and self._allows.has_tag(tag)

    def tag_fully_denied(self, tag: str) -> bool:
        return self._denies.has_attribute(tag.lower(), ALL)

    def tag_ok(self, tag: str) -> bool:
        if self.tag_fully_denied(tag):
            return False
        return self.tag_permitted(tag)

    # Attribute decisions

    def attribute_permitted(self, tag: str, attribute: str, value: str | None) -> bool:
        return _attribute_matches(self._allows, tag, attribute, value)

    def attribute_denied(self, tag: str, attribute: str, value: str | None) -> bool:
        return _attribute_matches(self._denies, tag, attribute, value)

    def attribute_ok(self, tag: str, attribute: str, value: str | None) -> bool:
        if self.attribute_denied(tag, attribute, value):
            return False
        return self.attribute_permitted(tag, attribute, value)


def _attribute_matches(table: RuleTable, tag: str, attribute: str, value: str | None) -> bool:
    tag = tag.lower()
    attribute = attribute.lower()
    value = "" if value is None else value.lower()
    return (
        table.has_value(tag, attribute, value)
        or table.has_value(tag, attribute, ANY)
        or table.has_value(ANY, attribute, ANY)
        or table.has_value(ANY, attribute, value)
        or table.has_attribute(tag, ANY)
    )


def _compile_fragment(fragment: Fragment, kind: str) -> dict[str, dict[str, frozenset[str]]]:
    if not isinstance(fragment, Mapping):
        raise RuleError(f"{kind} rules must be a mapping of tag names, got {type(fragment).__name__}")

    compiled: dict[str, dict[str, frozenset[str]]] = {}
    for tag, attributes in fragment.items():
        tag = _normalize(tag, "tag name")
        # "P" and "p" in one fragment describe the same tag.
        compiled.setdefault(tag, {}).update(_compile_attributes(tag, attributes, kind))
    return compiled


def _compile_attributes(tag: str, attributes: Any, kind: str) -> dict[str, frozenset[str]]:
    if attributes is None:
        return {}
    if isinstance(attributes, str):
        attributes = (attributes,)

    if isinstance(attributes, Mapping):
        items: Iterable[tuple[Any, Any]] = attributes.items()
    elif isinstance(attributes, Iterable):
        items = ((name, None) for name in attributes)
    else:
        raise RuleError(
            f"{kind} rules for <{tag}> must be a mapping or a collection of attribute names, "
            f"got {type(attributes).__name__}"
        )

    compiled: dict[str, frozenset[str]] = {}
    for name, values in items:
        name = _normalize(name, f"attribute name of <{tag}>")
        if name == NONE:
            continue
        if name == ALL:
            if kind != DENY:
                raise RuleError(f"'all' removes whole tags and is only valid in deny rules (<{tag}>)")
            compiled[ALL] = frozenset()
            continue
        compiled[name] = _compile_values(tag, name, values)
    return compiled


def _compile_values(tag: str, attribute: str, values: Any) -> frozenset[str]:
    if values is None:
        return frozenset({ANY})
    if isinstance(values, str):
        values = (values,)
    if not isinstance(values, Iterable) or isinstance(values, Mapping):
        raise RuleError(
            f"values for <{tag} {attribute}> must be a list of strings, got {type(values).__name__}"
        )

    normalized = {_normalize(value, f"value of <{tag} {attribute}>") for value in values}
    if not normalized:
        return frozenset({ANY})
    normalized.discard(NONE)
    return frozenset(normalized)


def _normalize(key: Any, what: str) -> str:
    if not isinstance(key, str):
        raise RuleError(f"{what} must be a string, got {type(key).__name__}: {key!r}")
    return key.lower()
